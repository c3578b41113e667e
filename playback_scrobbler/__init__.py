"""Playback Scrobbler - watches local media players and records what you listen to."""

__version__ = "0.1.0"
