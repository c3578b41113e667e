"""In-memory per-player tracking state."""

from typing import Dict, Iterable, List

from ..models.playback import PlaybackSnapshot


class EngineState:
    """Last accepted snapshot and scrobble flag for every known player.

    Both maps always hold the same keys. Nothing here outlives the process.
    """

    def __init__(self):
        self.last_snapshot: Dict[str, PlaybackSnapshot] = {}
        self.scrobbled: Dict[str, bool] = {}

    def __contains__(self, player: str) -> bool:
        return player in self.last_snapshot

    def __len__(self) -> int:
        return len(self.last_snapshot)

    def players(self) -> List[str]:
        return list(self.last_snapshot)

    def track(self, player: str) -> None:
        """Start tracking a player with an empty snapshot."""
        self.last_snapshot[player] = PlaybackSnapshot.empty()
        self.scrobbled[player] = False

    def forget(self, player: str) -> None:
        self.last_snapshot.pop(player, None)
        self.scrobbled.pop(player, None)

    def departed(self, present: Iterable[str]) -> List[str]:
        """Players tracked so far that are missing from ``present``."""
        present = set(present)
        return [player for player in self.last_snapshot if player not in present]

    def start_track(self, player: str, snapshot: PlaybackSnapshot) -> None:
        self.last_snapshot[player] = snapshot
        self.scrobbled[player] = False

    def mark_scrobbled(self, player: str) -> None:
        self.scrobbled[player] = True
