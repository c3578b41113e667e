"""Data models for Playback Scrobbler."""

from .playback import PlaybackSnapshot, PlaybackState, Scrobble

__all__ = ["PlaybackSnapshot", "PlaybackState", "Scrobble"]
