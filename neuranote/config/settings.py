"""
Settings management for NeuraNote
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict, field


logger = logging.getLogger(__name__)

FOLDER_COLORS = [
    '#0EA5E9', '#10B981', '#F59E0B', '#EF4444', '#8B5CF6',
    '#EC4899', '#6366F1', '#14B8A6', '#84CC16', '#F97316',
]


@dataclass
class BackendConfig:
    """Backend service configuration"""
    base_url: str = "http://127.0.0.1:8000"
    api_timeout: int = 30
    analyze_timeout: int = 180


@dataclass
class CaptureConfig:
    """Capture staging configuration"""
    max_batch: int = 5
    default_folder_color: str = FOLDER_COLORS[0]
    folder_name_prefix: str = "Meeting_"
    camera_index: int = 0
    jpeg_quality: int = 92


@dataclass
class WindowConfig:
    """Main window geometry"""
    width: int = 1280
    height: int = 800
    sidebar_width: int = 280


@dataclass
class UIConfig:
    """UI behavior configuration"""
    notice_duration_ms: int = 3000
    success_duration_ms: int = 5000
    default_sort_key: str = "date"
    default_sort_order: str = "desc"
    export_dir: str = field(default_factory=lambda: str(Path.home() / "Downloads"))


class Settings:
    """Main settings manager"""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".config" / "neuranote"
        self.config_file = self.config_dir / "settings.json"
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Default settings
        self.backend = BackendConfig()
        self.capture = CaptureConfig()
        self.windows = WindowConfig()
        self.ui = UIConfig()

        # Load existing settings
        self.load()

    def load(self):
        """Load settings from file"""
        if not self.config_file.exists():
            return

        try:
            with open(self.config_file, 'r') as f:
                data = json.load(f)

            if 'backend' in data:
                self.backend = BackendConfig(**data['backend'])

            if 'capture' in data:
                self.capture = CaptureConfig(**data['capture'])

            if 'windows' in data:
                self.windows = WindowConfig(**data['windows'])

            if 'ui' in data:
                self.ui = UIConfig(**data['ui'])

        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading settings from {self.config_file}: {e}")
            logger.info("Using default settings")
            self._reset_defaults()

    def _reset_defaults(self):
        self.backend = BackendConfig()
        self.capture = CaptureConfig()
        self.windows = WindowConfig()
        self.ui = UIConfig()

    def save(self):
        """Save settings to file"""
        try:
            with open(self.config_file, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")

    @property
    def log_dir(self) -> Path:
        return self.config_dir / "logs"

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary"""
        return {
            'backend': asdict(self.backend),
            'capture': asdict(self.capture),
            'windows': asdict(self.windows),
            'ui': asdict(self.ui)
        }
