"""
Filter/Sort Engine - derives the visible, ordered folders or notes
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Union

from ..models.records import Folder, Note


class SortKey(Enum):
    DATE = "date"
    NAME = "name"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


class TypeFilter(Enum):
    ALL = "all"
    PRICING = "pricing"
    SPECS = "specs"
    ACTION = "action"


@dataclass
class ViewState:
    """Search, sort and type filter of the records view"""
    search_query: str = ""
    sort_key: SortKey = SortKey.DATE
    sort_order: SortOrder = SortOrder.DESC
    type_filter: TypeFilter = TypeFilter.ALL


def _timestamp(value: Optional[datetime]) -> float:
    return value.timestamp() if value is not None else 0.0


def _matches_type(note: Note, type_filter: TypeFilter) -> bool:
    if type_filter == TypeFilter.PRICING:
        return bool(note.pricing_information)
    if type_filter == TypeFilter.SPECS:
        return bool(note.product_details)
    if type_filter == TypeFilter.ACTION:
        return len(note.action_items) > 0
    return True


def filter_folders(folders: Sequence[Folder], state: ViewState) -> List[Folder]:
    query = state.search_query.lower()
    visible = [f for f in folders if query in f.name.lower()] if query else list(folders)

    if state.sort_key == SortKey.DATE:
        key = lambda f: _timestamp(f.created_at)
    else:
        key = lambda f: (f.name.lower(), f.name)
    # sorted() is stable in both directions, so ties keep fetch order
    return sorted(visible, key=key, reverse=state.sort_order == SortOrder.DESC)


def filter_notes(notes: Sequence[Note], state: ViewState) -> List[Note]:
    query = state.search_query.lower()
    visible = [n for n in notes if query in n.customer_information.lower()] if query else list(notes)

    if state.type_filter != TypeFilter.ALL:
        visible = [n for n in visible if _matches_type(n, state.type_filter)]

    if state.sort_key == SortKey.DATE:
        key = lambda n: _timestamp(n.created_at)
    else:
        key = lambda n: (n.customer_information.lower(), n.customer_information)
    return sorted(visible, key=key, reverse=state.sort_order == SortOrder.DESC)


def visible_items(folders: Sequence[Folder], notes: Sequence[Note], active_folder_id: Optional[int],
                  state: ViewState) -> Union[List[Folder], List[Note]]:
    """Folder list when no folder is active, otherwise that folder's notes"""
    if active_folder_id is None:
        return filter_folders(folders, state)
    return filter_notes(notes, state)
