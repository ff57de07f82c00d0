"""
Services module for NeuraNote.
Backend transport, event bus and the client error taxonomy.
"""

from .backend_client import BackendClient, APIResponse
from .events import EventBus
from .errors import (
    NeuraNoteError,
    ValidationError,
    FolderResolutionError,
    SubmissionError,
    DeleteError,
    FetchError,
)

__all__ = [
    "BackendClient",
    "APIResponse",
    "EventBus",
    "NeuraNoteError",
    "ValidationError",
    "FolderResolutionError",
    "SubmissionError",
    "DeleteError",
    "FetchError",
]
