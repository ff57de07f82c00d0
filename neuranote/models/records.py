"""
Data models for captures, folders and notes
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any


class SourceKind(Enum):
    IMAGE = "image"
    TEXT = "text"


class CaptureMode(Enum):
    UPLOAD = "upload"
    WEBCAM = "webcam"
    TEXT = "text"


@dataclass
class UploadFile:
    """File object ready for a multipart upload"""
    filename: str
    content_type: str
    content: bytes


@dataclass
class StagedPage:
    """One staged input page.

    ``payload`` is a data URL (``data:<type>;base64,...``) so that uploaded
    files and camera frames share one representation. ``origin_file`` is set
    only for pages that came from a real file.
    """
    id: str
    source_kind: SourceKind
    payload: str
    origin_file: Optional[UploadFile] = None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 backend timestamp, returning None when unusable"""
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        return None


def display_text(value: Any) -> str:
    """Render a loosely-typed note field as a single line of text"""
    if not value:
        return "N/A"
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        parts = [v for v in value.values() if isinstance(v, str)]
        return ", ".join(parts) or json.dumps(value)
    return str(value)


def format_date(value: Optional[datetime]) -> str:
    """Format like ``Jan 9, 2026``"""
    if value is None:
        return "N/A"
    return f"{value.strftime('%b')} {value.day}, {value.year}"


@dataclass
class Folder:
    """Named, colored container of notes"""
    id: int
    name: str
    color: str = ""
    created_at: Optional[datetime] = None
    created_by: str = ""
    is_favorite: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Folder":
        return cls(
            id=int(data['id']),
            name=data.get('name') or "",
            color=data.get('color') or "",
            created_at=parse_timestamp(data.get('created_at')),
            created_by=data.get('created_by') or "",
            is_favorite=bool(data.get('is_favorite', False)),
        )


@dataclass
class Note:
    """Structured result of one analysis submission"""
    id: int
    folder_id: int
    data: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        payload = data.get('data')
        return cls(
            id=int(data['id']),
            folder_id=int(data['folder_id']),
            data=payload if isinstance(payload, dict) else {},
            created_at=parse_timestamp(data.get('created_at')),
        )

    @property
    def customer_information(self) -> str:
        return display_text(self.data.get('customer_information'))

    @property
    def executive_summary(self) -> str:
        return display_text(self.data.get('executive_summary'))

    @property
    def product_details(self) -> Any:
        return self.data.get('product_details')

    @property
    def pricing_information(self) -> Any:
        return self.data.get('pricing_information')

    @property
    def action_items(self) -> List[Any]:
        items = self.data.get('action_items')
        return items if isinstance(items, list) else []

    @property
    def additional_notes(self) -> str:
        return display_text(self.data.get('additional_notes'))


@dataclass
class UserProfile:
    """Signed-in user shown in the sidebar badge"""
    username: str = "Guest User"

    @property
    def initials(self) -> str:
        parts = self.username.split()
        if not parts:
            return "GU"
        initials = parts[0][0]
        if len(parts) > 1:
            initials += parts[-1][0]
        return initials.upper()


@dataclass
class AnalysisRequest:
    """One outbound analysis submission"""
    folder_id: int
    mode: str
    merge: bool
    custom_prompt: str = ""
    text_content: Optional[str] = None
    files: List[UploadFile] = field(default_factory=list)
