"""
Capture pipeline for NeuraNote.
Stages pages, resolves the destination folder and prompt, and submits the analysis.
"""

from .page_store import PageStore, BatchSummary
from .folder_resolver import FolderResolver, dated_folder_name
from .prompt_resolver import PromptLibrary, resolve_prompt, REPORT_TYPES
from .submission import build_request
from .session import CaptureSession, SessionStatus

__all__ = [
    "PageStore",
    "BatchSummary",
    "FolderResolver",
    "dated_folder_name",
    "PromptLibrary",
    "resolve_prompt",
    "REPORT_TYPES",
    "build_request",
    "CaptureSession",
    "SessionStatus",
]
