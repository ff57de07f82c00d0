"""
Folder/Note Index - client-side cache of folders and of the active folder's notes
"""

import logging
from typing import Callable, Iterable, List, Optional

from ..models.records import Folder, Note
from ..services.backend_client import BackendClient
from ..services.errors import FetchError


class FolderNoteIndex:
    """Last fetched folders, plus the notes of the active folder.

    Every fetch is tagged with the context it was issued for. A response
    that arrives after the user switched folders, or after a newer reload
    started, is dropped. A failed fetch empties the affected list.
    """

    def __init__(self, backend_client: BackendClient):
        self.backend_client = backend_client
        self.logger = logging.getLogger(__name__)

        self.folders: List[Folder] = []
        self.notes: List[Note] = []
        self.active_folder_id: Optional[int] = None
        self.refresh_counter = 0
        self.last_error: Optional[str] = None

        self._folder_generation = 0
        self._note_generation = 0
        self._listeners: List[Callable[[], None]] = []

    def add_listener(self, callback: Callable[[], None]):
        self._listeners.append(callback)

    def _notify(self):
        for callback in self._listeners:
            callback()

    def folder(self, folder_id: Optional[int]) -> Optional[Folder]:
        return next((f for f in self.folders if f.id == folder_id), None)

    @property
    def favorites(self) -> List[Folder]:
        return [f for f in self.folders if f.is_favorite]

    async def _fetch_folders(self) -> List[Folder]:
        response = await self.backend_client.list_folders()
        if not response.success:
            raise FetchError(f"Could not load folders: {response.error}")
        return response.data

    async def _fetch_notes(self, folder_id: int) -> List[Note]:
        response = await self.backend_client.list_notes(folder_id)
        if not response.success:
            raise FetchError(f"Could not load notes: {response.error}")
        return response.data

    async def reload_folders(self) -> bool:
        """Returns False when the result was an error or got superseded"""
        self._folder_generation += 1
        generation = self._folder_generation
        try:
            folders = await self._fetch_folders()
        except FetchError as e:
            if generation != self._folder_generation:
                return False
            self.logger.warning(e.message)
            self.last_error = e.message
            self.folders = []
            self._notify()
            return False

        if generation != self._folder_generation:
            self.logger.debug("Discarding stale folder list")
            return False
        self.folders = folders
        self._notify()
        return True

    async def reload_notes(self) -> bool:
        """Returns False when the result was an error or got superseded"""
        self._note_generation += 1
        generation = self._note_generation
        folder_id = self.active_folder_id

        if folder_id is None:
            self.notes = []
            self._notify()
            return True

        try:
            notes = await self._fetch_notes(folder_id)
        except FetchError as e:
            if generation != self._note_generation or folder_id != self.active_folder_id:
                return False
            self.logger.warning(e.message)
            self.last_error = e.message
            self.notes = []
            self._notify()
            return False

        if generation != self._note_generation or folder_id != self.active_folder_id:
            self.logger.debug(f"Discarding stale notes of folder {folder_id}")
            return False
        self.notes = notes
        self._notify()
        return True

    async def set_active_folder(self, folder_id: Optional[int]) -> bool:
        """Switch folder context; previous notes are never shown under the new id"""
        if folder_id == self.active_folder_id:
            return True
        self.active_folder_id = folder_id
        self.notes = []
        self._notify()
        return await self.reload_notes()

    async def refresh(self) -> bool:
        """Handle an external refresh signal"""
        self.refresh_counter += 1
        self.last_error = None
        folders_ok = await self.reload_folders()
        notes_ok = await self.reload_notes()
        return folders_ok and notes_ok

    def remove_folders(self, folder_ids: Iterable[int]):
        """Optimistic local removal after a confirmed delete"""
        removed = set(folder_ids)
        self.folders = [f for f in self.folders if f.id not in removed]
        if self.active_folder_id in removed:
            self.active_folder_id = None
            self._note_generation += 1
            self.notes = []
        self._notify()

    def remove_notes(self, note_ids: Iterable[int]):
        removed = set(note_ids)
        self.notes = [n for n in self.notes if n.id not in removed]
        self._notify()
