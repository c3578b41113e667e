"""Scrobble decision loop."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Pattern

from ..errors import InvalidDuration, SourceError
from ..models.playback import PlaybackSnapshot
from ..sinks.base import Sink
from ..sources.base import Source
from .dispatch import send_now_playing, send_scrobble
from .normalizer import NormalizationRule, compile_blacklist, compile_rules
from .notifier import NotifierProtocol, notify_safely
from .policy import format_duration, min_play_time
from .state import EngineState


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScrobbleEngine:
    """Turns periodic playback snapshots into now-playing and scrobble events.

    Per player: the first valid snapshot, and every later change of artists,
    title or album, sends a now-playing update. A track is scrobbled once it
    has played for the minimum play time while in the Playing state, at most
    once per track change. Tracks that change before reaching the threshold
    are never scrobbled afterwards.
    """

    def __init__(
        self,
        sources: List[Source],
        sinks: List[Sink],
        logger: logging.Logger,
        notifier: Optional[NotifierProtocol] = None,
        min_playback_duration: int = 240,
        min_playback_percent: int = 50,
        blacklist: Optional[List[Pattern]] = None,
        rules: Optional[List[NormalizationRule]] = None,
        notify_on_scrobble: bool = False,
        notify_on_error: bool = False,
        clock: Callable[[], datetime] = _utcnow
    ):
        """Initialize the engine.

        Args:
            sources: Sources polled on every tick, in order
            sinks: Sinks receiving now-playing updates and scrobbles
            logger: Logger instance
            notifier: Desktop notifier (optional)
            min_playback_duration: Absolute scrobble threshold in seconds
            min_playback_percent: Relative scrobble threshold in percent
            blacklist: Compiled player blacklist
            rules: Compiled normalization rules
            notify_on_scrobble: Notify about now-playing updates and scrobbles
            notify_on_error: Notify about sink errors
            clock: Returns the current time, used when a source gives no
                capture timestamp
        """
        self.sources = sources
        self.sinks = sinks
        self.logger = logger
        self.notifier = notifier
        self.min_playback_duration = min_playback_duration
        self.min_playback_percent = min_playback_percent
        self.blacklist = blacklist or []
        self.rules = rules or []
        self.notify_on_scrobble = notify_on_scrobble
        self.notify_on_error = notify_on_error
        self.clock = clock

        self.state = EngineState()
        self._now_playing_notification_id = 0

    @classmethod
    def from_settings(
        cls,
        settings,
        sources: List[Source],
        sinks: List[Sink],
        notifier: Optional[NotifierProtocol],
        logger: logging.Logger
    ) -> 'ScrobbleEngine':
        """Create an engine from loaded settings.

        Args:
            settings: Settings instance
            sources: Configured sources
            sinks: Configured sinks
            notifier: Desktop notifier (optional)
            logger: Logger instance

        Returns:
            ScrobbleEngine instance
        """
        return cls(
            sources=sources,
            sinks=sinks,
            logger=logger,
            notifier=notifier,
            min_playback_duration=settings.min_playback_duration,
            min_playback_percent=settings.min_playback_percent,
            blacklist=compile_blacklist(settings.blacklist, logger),
            rules=compile_rules(settings.regexes, logger),
            notify_on_scrobble=settings.notifications.on_scrobble,
            notify_on_error=settings.notifications.on_error
        )

    def poll_sources(self) -> Dict[str, PlaybackSnapshot]:
        """Query every source and merge the results.

        A failing source is logged; whatever it managed to return is kept.

        Returns:
            Dictionary mapping player identity to snapshot
        """
        snapshots: Dict[str, PlaybackSnapshot] = {}

        for source in self.sources:
            try:
                found = source.get_snapshots(self.blacklist, self.rules)
            except SourceError as e:
                self.logger.error(f"Failed to query source {source.name}: {e}")
                found = e.partial
            except Exception as e:
                self.logger.error(f"Failed to query source {source.name}: {e}", exc_info=True)
                found = {}

            snapshots.update(found or {})

        return snapshots

    def update_players(self, snapshots: Dict[str, PlaybackSnapshot]) -> None:
        """Start tracking new players and forget departed ones."""
        for player in snapshots:
            if player not in self.state:
                self.logger.info(f"New player found: {player}")
                self.state.track(player)

        for player in self.state.departed(snapshots):
            self.logger.info(f"Player disappeared: {player}")
            self.state.forget(player)

    def evaluate_player(self, player: str, snapshot: PlaybackSnapshot) -> None:
        """Run the track-change and scrobble checks for one player."""
        if not snapshot.is_valid():
            self.logger.debug(f"[{player}] skipping incomplete metadata")
            return

        try:
            threshold = min_play_time(
                snapshot.duration,
                self.min_playback_duration,
                self.min_playback_percent
            )
        except InvalidDuration as e:
            self.logger.error(
                f"[{player}] cannot calculate minimum playback time for {snapshot.describe()}: {e}"
            )
            return

        previous = self.state.last_snapshot[player]

        if not snapshot.same_track(previous):
            started = snapshot.copy(
                position=timedelta(0),
                timestamp=snapshot.timestamp or self.clock()
            )
            self.logger.info(f"[{player}] started playing {started.describe()}")
            self.state.start_track(player, started)
            self._dispatch_now_playing(player, started)
            return

        # the start timestamp stays fixed for the whole track
        current = snapshot.copy(timestamp=previous.timestamp)

        if (current.position < threshold
                or not current.is_playing
                or self.state.scrobbled[player]):
            return

        self.logger.info(
            f"[{player}] scrobbling {current.describe()}, "
            f"played {format_duration(threshold)}/{format_duration(current.duration)}"
        )
        self.state.mark_scrobbled(player)
        self._dispatch_scrobble(player, current)

    def _dispatch_now_playing(self, player: str, snapshot: PlaybackSnapshot) -> None:
        scrobble = snapshot.to_scrobble()
        for sink in self.sinks:
            send_now_playing(
                player, sink, scrobble, self.notify_on_error, self.notifier, self.logger
            )

        if self.notify_on_scrobble:
            self._now_playing_notification_id = notify_safely(
                self.notifier,
                self.logger,
                self._now_playing_notification_id,
                "Now playing",
                scrobble.describe()
            )

    def _dispatch_scrobble(self, player: str, snapshot: PlaybackSnapshot) -> None:
        scrobble = snapshot.to_scrobble()
        accepted = [
            sink.name
            for sink in self.sinks
            if send_scrobble(
                player, sink, scrobble, self.notify_on_error, self.notifier, self.logger
            )
        ]

        if self.notify_on_scrobble and accepted:
            notify_safely(
                self.notifier,
                self.logger,
                0,
                "Scrobbled",
                f"{scrobble.describe()} ({', '.join(accepted)})"
            )

    def run_once(self) -> None:
        """Run one tick: poll, diff and dispatch."""
        snapshots = self.poll_sources()
        self.update_players(snapshots)

        for player, snapshot in snapshots.items():
            self.evaluate_player(player, snapshot)
