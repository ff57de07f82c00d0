"""
Capture Session - state of one capture episode and its submission
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Union

from ..models.records import CaptureMode
from ..services.backend_client import BackendClient
from ..services.errors import NeuraNoteError, SubmissionError, ValidationError
from ..services.events import EventBus, ANALYSIS_COMPLETED, NAVIGATE, RECORDS_CHANGED
from .folder_resolver import FolderResolver
from .page_store import BatchSummary, PageStore, DEFAULT_MAX_BATCH
from .prompt_resolver import PromptLibrary, DEFAULT_REPORT_TYPE
from .submission import build_request


class SessionStatus(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CaptureSession:
    """Owns the staged input of one capture and drives its submission.

    IDLE covers both the empty and the staging state; ``has_input`` tells
    them apart. Only one submission can be in flight at a time. A failed
    submission keeps every staged page and text so the user can retry.
    """

    def __init__(self, backend_client: BackendClient, folder_resolver: FolderResolver,
                 prompts: PromptLibrary, event_bus: Optional[EventBus] = None,
                 max_batch: int = DEFAULT_MAX_BATCH):
        self.backend_client = backend_client
        self.folder_resolver = folder_resolver
        self.prompts = prompts
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

        self.mode = CaptureMode.UPLOAD
        self.pages = PageStore(max_batch)
        self.text_content = ""
        self.selected_prompt_key = DEFAULT_REPORT_TYPE
        self.freeform_prompt = ""
        self.status = SessionStatus.IDLE
        self.last_error: Optional[str] = None
        self.last_result: Any = None

        self._merge_pages = False
        self._listeners: List[Callable[[], None]] = []
        self.pages.add_listener(self._on_pages_changed)

    # State
    @property
    def merge_pages(self) -> bool:
        return self._merge_pages

    @merge_pages.setter
    def merge_pages(self, value: bool):
        if not value and len(self.pages) > 1:
            self.logger.debug("Merge stays on while several pages are staged")
            return
        self._merge_pages = bool(value)
        self._notify()

    @property
    def has_input(self) -> bool:
        return len(self.pages) > 0 or bool(self.text_content.strip())

    @property
    def can_submit(self) -> bool:
        return self.has_input and self.status != SessionStatus.SUBMITTING

    def add_listener(self, callback: Callable[[], None]):
        self._listeners.append(callback)

    def _notify(self):
        for callback in self._listeners:
            callback()

    def _set_status(self, status: SessionStatus):
        if status != self.status:
            self.logger.debug(f"Capture session {self.status.value} -> {status.value}")
            self.status = status
        self._notify()

    def _on_pages_changed(self):
        if len(self.pages) > 1:
            self._merge_pages = True
        self.acknowledge()

    def acknowledge(self):
        """Leave a finished state once the user edits input again"""
        if self.status in (SessionStatus.SUCCEEDED, SessionStatus.FAILED):
            self.status = SessionStatus.IDLE
        self._notify()

    # Editing
    def set_mode(self, mode: CaptureMode):
        self.mode = mode
        self._notify()

    def set_text(self, text: str):
        self.text_content = text
        self.acknowledge()

    def set_freeform_prompt(self, text: str):
        self.freeform_prompt = text
        self._notify()

    def select_prompt(self, key: str):
        self.selected_prompt_key = key
        self._notify()

    async def add_files(self, files: Iterable[Union[str, Path]]) -> BatchSummary:
        return await self.pages.add_files(files)

    def add_captured_frame(self, frame_data: str):
        return self.pages.add_captured_frame(frame_data)

    def remove_page(self, page_id: str):
        self.pages.remove(page_id)

    def reset(self):
        """Drop staged input after a successful submission"""
        self.pages.clear()
        self.text_content = ""
        self.freeform_prompt = ""

    # Submission
    async def submit(self, explicit_folder_id: Optional[int] = None) -> Any:
        """Resolve the folder, build the request and run the analysis.

        Returns the created note, or None when a submission is already in
        flight. Raises the domain error after moving to FAILED.
        """
        if self.status == SessionStatus.SUBMITTING:
            self.logger.warning("Submission already in progress")
            return None
        if not self.has_input:
            raise ValidationError("Add pages or text before running the analysis")

        self.last_error = None
        self._set_status(SessionStatus.SUBMITTING)
        try:
            folder_id = await self.folder_resolver.resolve(explicit_folder_id)
            instruction = self.prompts.resolve(self.selected_prompt_key, self.freeform_prompt)
            request = build_request(self.mode, self.pages, self.text_content,
                                    self._merge_pages, folder_id, instruction)
            response = await self.backend_client.analyze(request)
            if not response.success:
                raise SubmissionError(response.error or "Analysis Failed")
        except NeuraNoteError as e:
            self._fail(e.message)
            raise
        except Exception as e:
            self._fail(str(e) or "Analysis Failed")
            raise SubmissionError(self.last_error) from e

        self.last_result = response.data
        self.reset()
        self._set_status(SessionStatus.SUCCEEDED)
        self.logger.info(f"Analysis stored in folder {folder_id}")

        if self.event_bus:
            await self.event_bus.publish(ANALYSIS_COMPLETED, response.data)
            await self.event_bus.publish(RECORDS_CHANGED)
            await self.event_bus.publish(NAVIGATE, "records")
        return response.data

    def _fail(self, message: str):
        self.logger.error(f"Analysis failed: {message}")
        self.last_error = message
        self._set_status(SessionStatus.FAILED)
