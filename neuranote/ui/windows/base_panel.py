"""
Base panel class for the NeuraNote views
"""

import asyncio
import logging
from typing import Awaitable, Optional, Set

from PyQt6.QtWidgets import QWidget

from ...services.errors import NeuraNoteError
from ..components.notice import NoticeLabel


class BasePanel(QWidget):
    """Base class for panels that run backend work on the qasync loop"""

    def __init__(self, notice_duration_ms: int = 3000):
        super().__init__()
        self.logger = logging.getLogger(self.__class__.__module__)
        self.notice = NoticeLabel(notice_duration_ms)
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro: Awaitable, error_prefix: Optional[str] = None) -> asyncio.Task:
        """Schedule a coroutine; domain errors end up in the notice label"""
        task = asyncio.create_task(self._guarded(coro, error_prefix))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded(self, coro: Awaitable, error_prefix: Optional[str]):
        try:
            return await coro
        except NeuraNoteError as e:
            message = f"{error_prefix}: {e.message}" if error_prefix else e.message
            self.logger.warning(message)
            self.notice.show_notice(message, error=True)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"Unexpected error: {e}", exc_info=True)
            self.notice.show_notice(error_prefix or "Something went wrong", error=True)

    def cancel_pending(self):
        for task in list(self._tasks):
            if not task.done():
                task.cancel()
