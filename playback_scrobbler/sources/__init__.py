"""Playback sources for Playback Scrobbler."""

import logging
from typing import List

from ..errors import SourceError
from .base import Source
from .media_control import MediaControlSource
from .mpris import MprisSource

__all__ = ["MediaControlSource", "MprisSource", "Source", "build_sources"]


def build_sources(settings, logger: logging.Logger) -> List[Source]:
    """Create the sources enabled in the settings.

    Sources that cannot be set up are logged and left out.
    """
    sources: List[Source] = []

    if settings.sources.dbus.enabled:
        try:
            sources.append(MprisSource(logger))
        except SourceError as e:
            logger.error(f"Cannot set up D-Bus source: {e}")

    media_control = settings.sources.media_control
    if media_control.enabled:
        sources.append(MediaControlSource(
            logger,
            command=media_control.command,
            arguments=media_control.arguments,
            timeout=media_control.timeout
        ))

    if not sources:
        logger.warning("No sources configured, nothing will be scrobbled")

    return sources
