"""
Data models for NeuraNote.
"""

from .records import (
    SourceKind,
    CaptureMode,
    UploadFile,
    StagedPage,
    Folder,
    Note,
    UserProfile,
    AnalysisRequest,
    parse_timestamp,
    display_text,
    format_date,
)

__all__ = [
    "SourceKind",
    "CaptureMode",
    "UploadFile",
    "StagedPage",
    "Folder",
    "Note",
    "UserProfile",
    "AnalysisRequest",
    "parse_timestamp",
    "display_text",
    "format_date",
]
