"""
Folder Resolver - picks the destination folder of a submission
"""

import logging
from datetime import date
from typing import Callable, Optional

from ..services.backend_client import BackendClient
from ..services.errors import FolderResolutionError
from ..services.events import EventBus, FOLDER_RESOLVED


def dated_folder_name(day: date, prefix: str = "Meeting_") -> str:
    return f"{prefix}{day.isoformat()}"


class FolderResolver:
    """Returns an explicit folder id, or finds or creates today's dated folder.

    Lookup-then-create is not atomic: two resolutions racing on the same day
    can both miss and create two folders with the same name.
    """

    def __init__(self, backend_client: BackendClient, default_color: str,
                 name_prefix: str = "Meeting_", today: Callable[[], date] = date.today,
                 event_bus: Optional[EventBus] = None):
        self.backend_client = backend_client
        self.default_color = default_color
        self.name_prefix = name_prefix
        self.today = today
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

    async def resolve(self, explicit_folder_id: Optional[int] = None) -> int:
        if explicit_folder_id is not None:
            return explicit_folder_id

        folder_name = dated_folder_name(self.today(), self.name_prefix)

        response = await self.backend_client.list_folders()
        if not response.success:
            raise FolderResolutionError(f"Could not load folders: {response.error}")

        existing = next((f for f in response.data if f.name == folder_name), None)
        if existing:
            self.logger.info(f"Reusing folder {folder_name} ({existing.id})")
            folder_id = existing.id
        else:
            response = await self.backend_client.create_folder(folder_name, self.default_color)
            if not response.success:
                raise FolderResolutionError(f"Could not create folder: {response.error}")
            folder_id = response.data
            self.logger.info(f"Created folder {folder_name} ({folder_id})")

        if self.event_bus:
            await self.event_bus.publish(FOLDER_RESOLVED, folder_id)
        return folder_id
