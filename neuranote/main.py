#!/usr/bin/env python3
"""
NeuraNote - meeting capture and records desktop client
"""

import sys
import asyncio
import logging
from typing import Optional

import qasync
from PyQt6.QtWidgets import QApplication

from .capture.folder_resolver import FolderResolver
from .capture.prompt_resolver import PromptLibrary
from .capture.session import CaptureSession
from .config.settings import Settings
from .records.actions import NoteActions, fetch_user_profile
from .records.browser import RecordsBrowser
from .records.filtering import SortKey, SortOrder, ViewState
from .services.backend_client import BackendClient
from .services.events import EventBus
from .ui.windows.capture_tab import CaptureTab
from .ui.windows.main_window import MainWindow
from .ui.windows.records_tab import RecordsTab
from .ui.windows.sidebar import Sidebar
from .utils.logging_config import setup_logging


class NeuraNoteApp:
    """Main application class"""

    def __init__(self):
        self.app = QApplication(sys.argv)
        self.settings = Settings()

        setup_logging(log_dir=self.settings.log_dir)
        self.logger = logging.getLogger(__name__)

        self.event_bus = EventBus()
        self.backend_client = BackendClient(self.settings.backend)
        self.prompts = PromptLibrary(self.backend_client)
        self.folder_resolver = FolderResolver(
            self.backend_client,
            self.settings.capture.default_folder_color,
            self.settings.capture.folder_name_prefix,
            event_bus=self.event_bus,
        )
        self.session = CaptureSession(
            self.backend_client, self.folder_resolver, self.prompts,
            event_bus=self.event_bus, max_batch=self.settings.capture.max_batch,
        )
        self.browser = RecordsBrowser(self.backend_client, event_bus=self.event_bus, view=self._initial_view())
        self.actions = NoteActions(self.backend_client, self.settings.ui.export_dir)
        self.window: Optional[MainWindow] = None

        self.logger.info("NeuraNote starting up...")

    def _initial_view(self) -> ViewState:
        try:
            return ViewState(sort_key=SortKey(self.settings.ui.default_sort_key),
                             sort_order=SortOrder(self.settings.ui.default_sort_order))
        except ValueError as e:
            self.logger.warning(f"Invalid default sort in settings: {e}")
            return ViewState()

    def _build_window(self):
        sidebar = Sidebar(self.settings, self.browser)
        capture_tab = CaptureTab(self.settings, self.session, lambda: self.browser.active_folder_id)
        records_tab = RecordsTab(self.settings, self.browser, self.actions)
        self.window = MainWindow(self.settings, self.event_bus, sidebar, capture_tab, records_tab)
        self.window.show()

    async def initialize(self) -> bool:
        """Connect to the backend and load the initial data"""
        await self.backend_client.connect()
        self._build_window()

        if not await self.browser.refresh():
            self.logger.warning(f"Initial load failed: {self.browser.index.last_error}")
        if await self.prompts.load():
            self.window.capture_tab.populate_prompts()
        self.window.set_user(await fetch_user_profile(self.backend_client))

        self.logger.info("Application initialized successfully")
        return True

    async def cleanup_async(self):
        """Cleanup async resources"""
        self.logger.info("Starting async cleanup...")
        await self.backend_client.disconnect()
        self.logger.info("Async cleanup complete")

    def run(self) -> int:
        """Run the application with the Qt and asyncio loops integrated"""
        loop = qasync.QEventLoop(self.app)
        asyncio.set_event_loop(loop)

        app_close_event = asyncio.Event()
        self.app.aboutToQuit.connect(app_close_event.set)

        async def init_and_run():
            await self.initialize()
            await app_close_event.wait()
            await self.cleanup_async()

        try:
            with loop:
                loop.run_until_complete(init_and_run())
            self.logger.info("Application exited")
            return 0
        except KeyboardInterrupt:
            self.logger.info("Application interrupted by user")
            return 0


def main():
    """Main entry point"""
    app = NeuraNoteApp()
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
