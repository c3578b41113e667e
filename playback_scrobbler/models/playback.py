"""Playback snapshot and scrobble models."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Union


class PlaybackState(str, Enum):
    """Transport state, using the MPRIS PlaybackStatus names."""

    PLAYING = "Playing"
    PAUSED = "Paused"
    STOPPED = "Stopped"


def _as_timedelta(value: Union[timedelta, int, float]) -> timedelta:
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


@dataclass
class Scrobble:
    """A listening event as handed to sinks.

    ``timestamp`` is the moment the track started playing.
    """

    artists: List[str] = field(default_factory=list)
    track: str = ""
    album: str = ""
    duration: timedelta = timedelta(0)
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        """Accept plain seconds for the duration."""
        self.duration = _as_timedelta(self.duration)
        self.artists = list(self.artists)

    def join_artists(self) -> str:
        return ", ".join(self.artists)

    def is_valid(self) -> bool:
        """Whether the metadata is complete enough to compare and scrobble."""
        return bool(
            self.join_artists()
            and self.track
            and self.album
            and self.duration != timedelta(0)
        )

    def same_track(self, other: "Scrobble") -> bool:
        """Compare track identity: artists (in order), title and album."""
        if len(self.artists) != len(other.artists):
            return False
        for mine, theirs in zip(self.artists, other.artists):
            if mine != theirs:
                return False
        return self.track == other.track and self.album == other.album

    def describe(self) -> str:
        return f"{self.track} by {self.join_artists()}"


@dataclass
class PlaybackSnapshot(Scrobble):
    """One player's state at one point in time.

    ``timestamp`` is the capture time until the engine replaces it with the
    start time of the track.
    """

    state: PlaybackState = PlaybackState.STOPPED
    position: timedelta = timedelta(0)

    def __post_init__(self):
        """Convert state and position from their raw forms."""
        super().__post_init__()
        if isinstance(self.state, str):
            self.state = PlaybackState(self.state)
        self.position = _as_timedelta(self.position)

    @classmethod
    def empty(cls) -> "PlaybackSnapshot":
        return cls()

    @property
    def is_playing(self) -> bool:
        return self.state == PlaybackState.PLAYING

    def copy(self, **changes) -> "PlaybackSnapshot":
        return replace(self, artists=list(changes.pop("artists", self.artists)), **changes)

    def to_scrobble(self) -> Scrobble:
        return Scrobble(
            artists=list(self.artists),
            track=self.track,
            album=self.album,
            duration=self.duration,
            timestamp=self.timestamp,
        )
