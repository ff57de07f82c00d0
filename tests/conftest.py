"""
Pytest configuration and shared fixtures for NeuraNote tests.
"""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import pytest
from PIL import Image

from neuranote.models.records import Folder, Note, UserProfile
from neuranote.services.backend_client import APIResponse
from neuranote.services.events import EventBus


class FakeBackendClient:
    """In-memory stand-in for BackendClient.

    Methods listed in ``failing`` return an error response. ``calls`` records
    every call as ``(method, args)``. ``note_gates`` lets a test hold a notes
    listing until it sets the matching event.
    """

    def __init__(self):
        self.folders: List[Folder] = []
        self.notes: Dict[int, List[Note]] = {}
        self.prompts: Dict[str, str] = {}
        self.imported_prompts: Dict[str, str] = {}
        self.user: Optional[UserProfile] = UserProfile(username="Ada Lovelace")
        self.analysis_result: Any = None

        self.failing: Set[str] = set()
        self.failing_deletes: Set[int] = set()
        self.note_gates: Dict[int, asyncio.Event] = {}
        self.calls: List[tuple] = []
        self._next_id = 100

    def _record(self, method: str, *args) -> Optional[APIResponse]:
        self.calls.append((method, args))
        if method in self.failing:
            return APIResponse(success=False, error=f"{method} failed", status_code=500)
        return None

    def calls_to(self, method: str) -> List[tuple]:
        return [args for name, args in self.calls if name == method]

    def add_folder(self, name: str, created_at: Optional[datetime] = None, **kwargs) -> Folder:
        self._next_id += 1
        folder = Folder(id=self._next_id, name=name,
                        created_at=created_at or datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
                        **kwargs)
        self.folders.append(folder)
        return folder

    def add_note(self, folder_id: int, data: Dict[str, Any], created_at: Optional[datetime] = None) -> Note:
        self._next_id += 1
        note = Note(id=self._next_id, folder_id=folder_id, data=data, created_at=created_at)
        self.notes.setdefault(folder_id, []).append(note)
        return note

    async def get_user(self) -> APIResponse:
        return self._record("get_user") or APIResponse(success=True, data=self.user)

    async def list_folders(self) -> APIResponse:
        return self._record("list_folders") or APIResponse(success=True, data=list(self.folders))

    async def create_folder(self, name: str, color: str) -> APIResponse:
        failure = self._record("create_folder", name, color)
        if failure:
            return failure
        folder = self.add_folder(name, color=color)
        return APIResponse(success=True, data=folder.id)

    async def delete_folder(self, folder_id: int) -> APIResponse:
        failure = self._record("delete_folder", folder_id)
        if failure:
            return failure
        if folder_id in self.failing_deletes:
            return APIResponse(success=False, error="Folder is locked", status_code=409)
        self.folders = [f for f in self.folders if f.id != folder_id]
        self.notes.pop(folder_id, None)
        return APIResponse(success=True, data={'status': 'deleted'})

    async def set_favorite(self, folder_id: int, is_favorite: bool) -> APIResponse:
        failure = self._record("set_favorite", folder_id, is_favorite)
        if failure:
            return failure
        for folder in self.folders:
            if folder.id == folder_id:
                folder.is_favorite = is_favorite
        return APIResponse(success=True, data={})

    async def list_notes(self, folder_id: int) -> APIResponse:
        failure = self._record("list_notes", folder_id)
        if failure:
            return failure
        gate = self.note_gates.get(folder_id)
        if gate:
            await gate.wait()
        return APIResponse(success=True, data=list(self.notes.get(folder_id, [])))

    async def delete_note(self, note_id: int) -> APIResponse:
        failure = self._record("delete_note", note_id)
        if failure:
            return failure
        for folder_id, notes in self.notes.items():
            self.notes[folder_id] = [n for n in notes if n.id != note_id]
        return APIResponse(success=True, data={})

    async def get_prompts(self) -> APIResponse:
        return self._record("get_prompts") or APIResponse(success=True, data=dict(self.prompts))

    async def create_prompt(self, name: str, content: str) -> APIResponse:
        failure = self._record("create_prompt", name, content)
        if failure:
            return failure
        self.prompts[name] = content
        return APIResponse(success=True, data={})

    async def import_prompts(self, file_path) -> APIResponse:
        failure = self._record("import_prompts", file_path)
        return failure or APIResponse(success=True, data=dict(self.imported_prompts))

    async def analyze(self, request) -> APIResponse:
        failure = self._record("analyze", request)
        if failure:
            return failure
        note = self.add_note(request.folder_id, {'customer_information': 'Acme'})
        return APIResponse(success=True, data=self.analysis_result or note)

    async def generate_pdf(self, note_id: int) -> APIResponse:
        return self._record("generate_pdf", note_id) or APIResponse(success=True, data=b"%PDF-1.4")

    async def generate_csv(self, note_data: Dict[str, Any]) -> APIResponse:
        return self._record("generate_csv", note_data) or APIResponse(success=True, data=b"a,b\n1,2\n")

    async def send_email(self, note_id: int, mode: str = "text") -> APIResponse:
        return self._record("send_email", note_id, mode) or APIResponse(success=True, data={})


@pytest.fixture
def backend() -> FakeBackendClient:
    """Empty in-memory backend."""
    return FakeBackendClient()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def image_files(tmp_path: Path) -> List[Path]:
    """Three small JPEG files on disk."""
    paths = []
    for index, color in enumerate(["red", "green", "blue"]):
        path = tmp_path / f"page_{index}.jpg"
        Image.new("RGB", (8, 8), color).save(path, format="JPEG")
        paths.append(path)
    return paths


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "brochure.pdf"
    path.write_bytes(b"%PDF-1.4\n%%EOF\n")
    return path
