"""
Configuration module for NeuraNote.
"""

from .settings import (
    Settings,
    BackendConfig,
    CaptureConfig,
    WindowConfig,
    UIConfig,
    FOLDER_COLORS,
)

__all__ = [
    "Settings",
    "BackendConfig",
    "CaptureConfig",
    "WindowConfig",
    "UIConfig",
    "FOLDER_COLORS",
]
