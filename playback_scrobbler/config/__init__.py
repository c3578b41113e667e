"""Configuration module for Playback Scrobbler."""

from .settings import Settings

__all__ = ["Settings"]
