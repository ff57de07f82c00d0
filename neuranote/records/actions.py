"""
Note actions - PDF/CSV export, e-mail hand-off and the user badge
"""

import logging
import re
from pathlib import Path
from typing import Union

import aiofiles

from ..models.records import Note, UserProfile
from ..services.backend_client import BackendClient
from ..services.errors import NeuraNoteError

EMAIL_MODES = ("text", "pdf")


def export_filename(note: Note, extension: str) -> str:
    stem = re.sub(r'[^a-z0-9]', '_', note.customer_information, flags=re.IGNORECASE)
    return f"{stem}.{extension}"


async def fetch_user_profile(backend_client: BackendClient) -> UserProfile:
    """Signed-in user, or the guest profile when the lookup fails"""
    response = await backend_client.get_user()
    if response.success:
        return response.data
    logging.getLogger(__name__).warning(f"User lookup failed: {response.error}")
    return UserProfile()


class NoteActions:
    """Exports and mail hand-off for a single note"""

    def __init__(self, backend_client: BackendClient, export_dir: Union[str, Path]):
        self.backend_client = backend_client
        self.export_dir = Path(export_dir)
        self.logger = logging.getLogger(__name__)

    async def _write(self, filename: str, content: bytes) -> Path:
        self.export_dir.mkdir(parents=True, exist_ok=True)
        target = self.export_dir / filename
        async with aiofiles.open(target, 'wb') as f:
            await f.write(content)
        self.logger.info(f"Exported {target}")
        return target

    async def export_pdf(self, note: Note) -> Path:
        response = await self.backend_client.generate_pdf(note.id)
        if not response.success:
            raise NeuraNoteError(f"PDF Generation Failed: {response.error}")
        return await self._write(export_filename(note, "pdf"), response.data)

    async def export_csv(self, note: Note) -> Path:
        response = await self.backend_client.generate_csv(note.data)
        if not response.success:
            raise NeuraNoteError(f"CSV Failed: {response.error}")
        return await self._write(export_filename(note, "csv"), response.data)

    async def send_email(self, note: Note, mode: str = "text"):
        if mode not in EMAIL_MODES:
            raise NeuraNoteError(f"Unknown e-mail mode: {mode}")
        response = await self.backend_client.send_email(note.id, mode)
        if not response.success:
            raise NeuraNoteError(f"Failed to open Outlook: {response.error}")
