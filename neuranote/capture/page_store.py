"""
Page Store - ordered staging area for the pages of one capture
"""

import asyncio
import base64
import logging
import mimetypes
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

import aiofiles

from ..models.records import SourceKind, StagedPage, UploadFile
from ..services.errors import ValidationError

DEFAULT_MAX_BATCH = 5

OS_ARTIFACTS = {'Thumbs.db', 'desktop.ini', 'Icon\r'}
DOCUMENT_TYPES = {'application/pdf'}


def new_page_id(prefix: str) -> str:
    """Timestamp plus random suffix, unique within a session"""
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:10]}"


def to_data_url(content: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"


def is_ignored(name: str) -> bool:
    """Hidden files and OS artifacts are dropped silently"""
    return name.startswith('.') or name in OS_ARTIFACTS


@dataclass
class BatchSummary:
    """Outcome of one batch add"""
    accepted: int = 0
    skipped: int = 0
    truncated: int = 0
    limit: int = DEFAULT_MAX_BATCH

    @property
    def notices(self) -> List[str]:
        notices = []
        if self.truncated:
            notices.append(f"Limited to {self.limit} files for performance")
        if self.accepted == 0:
            notices.append("No valid images found")
        elif self.skipped:
            notices.append(f"Imported {self.accepted} files ({self.skipped} skipped)")
        else:
            notices.append(f"Imported {self.accepted} files")
        return notices

    @property
    def message(self) -> str:
        return self.notices[-1]

    @property
    def is_error(self) -> bool:
        return self.accepted == 0


class PageStore:
    """Ordered collection of staged pages"""

    def __init__(self, max_batch: int = DEFAULT_MAX_BATCH):
        self.max_batch = max_batch
        self.logger = logging.getLogger(__name__)
        self._pages: List[StagedPage] = []
        self._listeners: List[Callable[[], None]] = []

    @property
    def pages(self) -> List[StagedPage]:
        return list(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __iter__(self):
        return iter(list(self._pages))

    def add_listener(self, callback: Callable[[], None]):
        """Called after every add or remove"""
        self._listeners.append(callback)

    def _notify(self):
        for callback in self._listeners:
            callback()

    def _validate(self, path: Path) -> str:
        """Return the media type of an acceptable file"""
        content_type, _ = mimetypes.guess_type(path.name)
        if not content_type:
            raise ValidationError(f"Unsupported file type: {path.name}")
        if not content_type.startswith('image/') and content_type not in DOCUMENT_TYPES:
            raise ValidationError(f"Unsupported file type: {path.name} ({content_type})")
        return content_type

    async def _decode(self, path: Path, content_type: str) -> StagedPage:
        async with aiofiles.open(path, 'rb') as f:
            content = await f.read()
        upload = UploadFile(filename=path.name, content_type=content_type, content=content)
        return StagedPage(
            id=new_page_id("file"),
            source_kind=SourceKind.IMAGE,
            payload=to_data_url(content, content_type),
            origin_file=upload,
        )

    async def add_files(self, files: Iterable[Union[str, Path]], max_batch: Optional[int] = None) -> BatchSummary:
        """Stage a batch of files.

        Only the first ``max_batch`` entries are looked at; the excess is
        reported as a truncation. Hidden files and OS artifacts are dropped
        without counting. Unsupported types and unreadable files are counted
        as skipped and never abort the rest of the batch.
        """
        max_batch = self.max_batch if max_batch is None else max_batch
        paths = [Path(p) for p in files]
        summary = BatchSummary(limit=max_batch)

        if len(paths) > max_batch:
            summary.truncated = len(paths) - max_batch
            self.logger.warning(f"Batch of {len(paths)} files truncated to {max_batch}")
            paths = paths[:max_batch]

        pending = []
        for path in paths:
            if is_ignored(path.name):
                self.logger.debug(f"Ignoring {path.name}")
                continue
            try:
                content_type = self._validate(path)
            except ValidationError as e:
                self.logger.warning(e.message)
                summary.skipped += 1
                continue
            pending.append((path, content_type))

        results = await asyncio.gather(
            *(self._decode(path, content_type) for path, content_type in pending),
            return_exceptions=True,
        )

        new_pages = []
        for (path, _), result in zip(pending, results):
            if isinstance(result, BaseException):
                self.logger.error(f"Error reading file {path.name}: {result}")
                summary.skipped += 1
            else:
                new_pages.append(result)

        summary.accepted = len(new_pages)
        if new_pages:
            self._pages.extend(new_pages)
            self._notify()
        self.logger.info(f"Batch add: {summary.accepted} accepted, {summary.skipped} skipped")
        return summary

    def add_captured_frame(self, frame_data: str) -> StagedPage:
        """Stage one camera frame given as an encoded image data URL"""
        page = StagedPage(id=new_page_id("webcam"), source_kind=SourceKind.IMAGE, payload=frame_data)
        self._pages.append(page)
        self._notify()
        return page

    def remove(self, page_id: str):
        """Remove by id; unknown ids are ignored"""
        remaining = [page for page in self._pages if page.id != page_id]
        if len(remaining) != len(self._pages):
            self._pages = remaining
            self._notify()

    def clear(self):
        if self._pages:
            self._pages = []
            self._notify()
