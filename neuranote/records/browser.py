"""
Records browser - ties the index, view state, selection and tree expansion together
"""

import asyncio
import logging
from typing import List, Optional, Union

from ..models.records import Folder, Note
from ..services.backend_client import BackendClient
from ..services.errors import DeleteError, NeuraNoteError, ValidationError
from ..services.events import EventBus, FOLDER_RESOLVED, RECORDS_CHANGED
from .filtering import SortKey, SortOrder, TypeFilter, ViewState, visible_items
from .grouping import ExpansionState, GroupedFolders, group_by_date
from .index import FolderNoteIndex
from .selection import BulkDeleteResult, SelectionModel


class RecordsBrowser:
    """Browsing state of the records view.

    Search, filter and folder-context changes that alter which items are
    visible clear the selection. Reloads only drop selected ids that no
    longer exist, so ids whose delete failed stay selected for a retry.
    """

    def __init__(self, backend_client: BackendClient, index: Optional[FolderNoteIndex] = None,
                 event_bus: Optional[EventBus] = None, view: Optional[ViewState] = None):
        self.backend_client = backend_client
        self.index = index or FolderNoteIndex(backend_client)
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

        self.view = view or ViewState()
        self.selection = SelectionModel()
        self.expansion = ExpansionState()
        self.selected_note: Optional[Note] = None
        self._expansion_initialized = False
        self.index.add_listener(self._on_index_changed)

        if event_bus:
            event_bus.subscribe(RECORDS_CHANGED, self.refresh)
            event_bus.subscribe(FOLDER_RESOLVED, self._on_folder_resolved)

    # Derived views
    @property
    def active_folder_id(self) -> Optional[int]:
        return self.index.active_folder_id

    @property
    def active_folder(self) -> Optional[Folder]:
        return self.index.folder(self.index.active_folder_id)

    def visible(self) -> Union[List[Folder], List[Note]]:
        return visible_items(self.index.folders, self.index.notes, self.index.active_folder_id, self.view)

    def visible_ids(self) -> List[int]:
        return [item.id for item in self.visible()]

    def grouped_folders(self) -> GroupedFolders:
        return group_by_date(self.index.folders)

    def _change_view(self, mutate):
        before = set(self.visible_ids())
        mutate()
        if set(self.visible_ids()) != before:
            self.selection.clear()

    def set_search(self, query: str):
        self._change_view(lambda: setattr(self.view, 'search_query', query))

    def set_type_filter(self, type_filter: TypeFilter):
        self._change_view(lambda: setattr(self.view, 'type_filter', type_filter))

    def set_sort(self, key: SortKey, order: SortOrder):
        self.view.sort_key = key
        self.view.sort_order = order

    def toggle_select_all(self):
        self.selection.toggle_all(self.visible_ids())

    # Loading
    async def open_folder(self, folder_id: Optional[int]) -> bool:
        """Change folder context; search, selection and note detail start over"""
        self.view.search_query = ""
        self.selection.clear()
        self.selected_note = None
        return await self.index.set_active_folder(folder_id)

    async def refresh(self) -> bool:
        ok = await self.index.refresh()
        existing = {f.id for f in self.index.folders}
        self.selection.replace(i for i in self.selection.selected if i in existing)
        return ok

    def _on_index_changed(self):
        # Current year and month open once, on the first non-empty folder list
        if self.index.folders and not self._expansion_initialized:
            self.expansion.reset_to_current()
            self._expansion_initialized = True

    async def _on_folder_resolved(self, folder_id: int):
        if folder_id != self.index.active_folder_id:
            await self.open_folder(folder_id)

    async def _records_changed(self):
        if self.event_bus:
            await self.event_bus.publish(RECORDS_CHANGED)

    # Folder operations
    async def create_folder(self, name: str, color: str) -> int:
        name = name.strip()
        if not name:
            raise ValidationError("Folder name is required")
        response = await self.backend_client.create_folder(name, color)
        if not response.success:
            raise NeuraNoteError(f"Could not create folder: {response.error}")
        await self.index.reload_folders()
        await self._records_changed()
        return response.data

    async def toggle_favorite(self, folder: Folder):
        response = await self.backend_client.set_favorite(folder.id, not folder.is_favorite)
        if not response.success:
            raise NeuraNoteError(f"Could not update favorite: {response.error}")
        await self.index.reload_folders()

    async def _delete_folder(self, folder_id: int) -> int:
        response = await self.backend_client.delete_folder(folder_id)
        if not response.success:
            raise DeleteError(f"Delete failed for folder {folder_id}: {response.error}", folder_id)
        return folder_id

    async def delete_folder(self, folder_id: int):
        await self._delete_folder(folder_id)
        self.index.remove_folders([folder_id])
        self.selection.replace(i for i in self.selection.selected if i != folder_id)
        await self._records_changed()

    async def bulk_delete(self) -> BulkDeleteResult:
        """Delete every selected folder; failed ids stay selected"""
        folder_ids = self.selection.selected
        result = BulkDeleteResult()
        if not folder_ids:
            return result

        outcomes = await asyncio.gather(
            *(self._delete_folder(folder_id) for folder_id in folder_ids),
            return_exceptions=True,
        )
        for folder_id, outcome in zip(folder_ids, outcomes):
            if isinstance(outcome, DeleteError):
                self.logger.error(outcome.message)
                result.failed.append(folder_id)
                result.errors.append(outcome.message)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.succeeded.append(folder_id)

        self.index.remove_folders(result.succeeded)
        self.selection.replace(result.failed)
        self.logger.info(result.message)
        if result.succeeded:
            await self._records_changed()
        return result

    # Note operations
    def open_note(self, note: Optional[Note]):
        self.selected_note = note

    async def delete_note(self, note_id: int):
        response = await self.backend_client.delete_note(note_id)
        if not response.success:
            raise DeleteError(f"Delete failed for note {note_id}: {response.error}", note_id)
        self.index.remove_notes([note_id])
        if self.selected_note and self.selected_note.id == note_id:
            self.selected_note = None
        await self._records_changed()
