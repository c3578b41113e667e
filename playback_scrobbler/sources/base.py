"""Source interface."""

from typing import Dict, List, Pattern, Protocol

from ..core.normalizer import NormalizationRule
from ..models.playback import PlaybackSnapshot


class Source(Protocol):
    """Produces playback snapshots for the players it can see.

    Identities must stay stable while the same player keeps running and
    should be prefixed with the source name so sources never collide.
    """

    name: str

    def get_snapshots(
        self,
        blacklist: List[Pattern],
        rules: List[NormalizationRule]
    ) -> Dict[str, PlaybackSnapshot]:
        ...
