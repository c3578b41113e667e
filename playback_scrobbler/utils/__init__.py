"""Utility modules for Playback Scrobbler."""

from .logger import setup_logger
from .platform import get_config_dir, is_linux, is_macos, is_windows

__all__ = ["setup_logger", "get_config_dir", "is_linux", "is_macos", "is_windows"]
