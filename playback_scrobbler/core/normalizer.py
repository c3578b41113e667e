"""Player blacklist and metadata rewrite rules."""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Pattern

from ..models.playback import PlaybackSnapshot


@dataclass
class NormalizationRule:
    """A compiled match/replace rule and the fields it applies to."""

    match: Pattern
    replace: str = ""
    artist: bool = False
    track: bool = False
    album: bool = False

    def apply(self, snapshot: PlaybackSnapshot) -> PlaybackSnapshot:
        """Return a copy of ``snapshot`` with the selected fields rewritten."""
        changes = {}
        if self.artist:
            changes["artists"] = [self.match.sub(self.replace, a) for a in snapshot.artists]
        if self.track:
            changes["track"] = self.match.sub(self.replace, snapshot.track)
        if self.album:
            changes["album"] = self.match.sub(self.replace, snapshot.album)
        return snapshot.copy(**changes)


def compile_blacklist(patterns: Iterable[str], logger: logging.Logger) -> List[Pattern]:
    """Compile player blacklist entries, skipping invalid expressions.

    Args:
        patterns: Regular expressions matched against player identities
        logger: Logger instance

    Returns:
        List of compiled patterns
    """
    compiled = []
    for expression in patterns:
        try:
            compiled.append(re.compile(expression))
        except re.error as e:
            logger.warning(f"Skipping invalid blacklist entry {expression!r}: {e}")

    if compiled:
        logger.info(f"Ignoring players matching {len(compiled)} blacklist pattern(s)")

    return compiled


def compile_rules(rule_configs: Iterable, logger: logging.Logger) -> List[NormalizationRule]:
    """Compile configured normalization rules in order.

    Args:
        rule_configs: Objects with ``match``, ``replace``, ``artist``,
            ``track`` and ``album`` attributes
        logger: Logger instance

    Returns:
        List of rules whose pattern and replacement compiled
    """
    rules = []
    for config in rule_configs:
        try:
            pattern = re.compile(config.match)
            # the replacement template is parsed even when nothing matches
            pattern.sub(config.replace, "")
        except re.error as e:
            logger.warning(f"Skipping invalid normalization rule {config.match!r}: {e}")
            continue

        rules.append(NormalizationRule(
            match=pattern,
            replace=config.replace,
            artist=config.artist,
            track=config.track,
            album=config.album
        ))

    return rules


def is_blacklisted(blacklist: Iterable[Pattern], player: str) -> bool:
    return any(pattern.search(player) for pattern in blacklist)


def apply_rules(snapshot: PlaybackSnapshot, rules: Iterable[NormalizationRule]) -> PlaybackSnapshot:
    # later rules see the output of earlier ones
    for rule in rules:
        snapshot = rule.apply(snapshot)
    return snapshot


def select_players(
    snapshots: Dict[str, PlaybackSnapshot],
    blacklist: Iterable[Pattern],
    rules: Iterable[NormalizationRule]
) -> Dict[str, PlaybackSnapshot]:
    """Drop blacklisted players and normalize the metadata of the rest.

    Args:
        snapshots: Raw snapshots keyed by player identity
        blacklist: Compiled blacklist patterns
        rules: Normalization rules

    Returns:
        Filtered and normalized snapshots
    """
    blacklist = list(blacklist)
    rules = list(rules)
    return {
        player: apply_rules(snapshot, rules)
        for player, snapshot in snapshots.items()
        if not is_blacklisted(blacklist, player)
    }
