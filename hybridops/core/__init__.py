"""Core package - Shared settings."""

from .config import PACKAGE_DIR, Settings, get_settings

__all__ = [
    "PACKAGE_DIR",
    "Settings",
    "get_settings",
]
