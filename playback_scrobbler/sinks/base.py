"""Sink interface."""

from datetime import datetime
from typing import List, Protocol

from ..models.playback import Scrobble


class Sink(Protocol):
    """Records now-playing updates and scrobbles somewhere.

    Every method raises ``SinkError`` on failure. ``now_playing`` is called
    on every track change, so it must be safe to repeat.
    """

    name: str

    def now_playing(self, scrobble: Scrobble) -> None:
        ...

    def scrobble(self, scrobble: Scrobble) -> None:
        ...

    def get_scrobbles(self, limit: int, time_from: datetime, time_to: datetime) -> List[Scrobble]:
        ...
