"""
Records browsing for NeuraNote.
Folder/note cache, date grouping, filtering, selection and note actions.
"""

from .index import FolderNoteIndex
from .grouping import group_by_date, ExpansionState, MONTH_NAMES
from .filtering import (
    ViewState,
    SortKey,
    SortOrder,
    TypeFilter,
    filter_folders,
    filter_notes,
    visible_items,
)
from .selection import SelectionModel, BulkDeleteResult
from .browser import RecordsBrowser
from .actions import NoteActions, fetch_user_profile, export_filename

__all__ = [
    "FolderNoteIndex",
    "group_by_date",
    "ExpansionState",
    "MONTH_NAMES",
    "ViewState",
    "SortKey",
    "SortOrder",
    "TypeFilter",
    "filter_folders",
    "filter_notes",
    "visible_items",
    "SelectionModel",
    "BulkDeleteResult",
    "RecordsBrowser",
    "NoteActions",
    "fetch_user_profile",
    "export_filename",
]
