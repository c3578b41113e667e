"""Exception types shared across the scrobbler."""

from typing import Dict, Optional


class ScrobblerError(Exception):
    """Base class for all scrobbler errors."""


class ConfigError(ScrobblerError, ValueError):
    """Raised when the configuration file cannot be used."""


class InvalidDuration(ScrobblerError):
    """Raised when a track reports a negative duration."""


class SourceError(ScrobblerError):
    """Raised when a source fails to query its players.

    Sources may attach the snapshots they did manage to read before failing;
    the engine still processes those.
    """

    def __init__(self, message: str, partial: Optional[Dict] = None):
        super().__init__(message)
        self.partial = partial or {}


class SinkError(ScrobblerError):
    """Raised when a sink cannot record a now-playing update or a scrobble."""


class NotificationError(ScrobblerError):
    """Raised when a desktop notification cannot be delivered."""
