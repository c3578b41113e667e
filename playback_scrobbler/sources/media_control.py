"""Now-playing information from the ``media-control`` helper (macOS)."""

import json
import logging
import subprocess
import sys
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Mapping, Optional, Pattern

from ..core.normalizer import NormalizationRule, select_players
from ..errors import SourceError
from ..models.playback import PlaybackSnapshot, PlaybackState


def snapshot_from_media_control(info: Mapping, captured_at: datetime) -> PlaybackSnapshot:
    """Build a snapshot from one ``media-control get`` JSON object.

    ``elapsedTime`` is measured at ``timestamp``; while playing, the time
    passed since then is added to the position.

    Args:
        info: Parsed JSON output
        captured_at: When the helper was run

    Returns:
        PlaybackSnapshot instance
    """
    playing = bool(info.get("playing"))
    position = timedelta(seconds=float(info.get("elapsedTime") or 0))

    measured_at = info.get("timestamp")
    if playing and measured_at:
        measured = datetime.fromisoformat(measured_at)
        if measured.tzinfo is None:
            measured = measured.replace(tzinfo=timezone.utc)
        drift = captured_at - measured
        if drift > timedelta(0):
            position += drift

    artist = info.get("artist") or ""

    return PlaybackSnapshot(
        artists=[artist] if artist else [],
        track=info.get("title") or "",
        album=info.get("album") or "",
        duration=timedelta(seconds=float(info.get("duration") or 0)),
        timestamp=captured_at,
        state=PlaybackState.PLAYING if playing else PlaybackState.STOPPED,
        position=position
    )


class MediaControlSource:
    """Runs an external helper that prints the system now-playing info as JSON."""

    name = "media-control"

    def __init__(
        self,
        logger: logging.Logger,
        command: str = "media-control",
        arguments: Optional[List[str]] = None,
        timeout: int = 5
    ):
        """Initialize source.

        Args:
            logger: Logger instance
            command: Helper executable
            arguments: Helper arguments
            timeout: Timeout per call in seconds
        """
        self.logger = logger
        self.command = command
        self.arguments = arguments if arguments is not None else ["get"]
        self.timeout = timeout

    def _get_subprocess_kwargs(self) -> dict:
        kwargs = {
            'capture_output': True,
            'text': True,
            'timeout': self.timeout
        }

        # Windows-specific: hide subprocess window
        if sys.platform == 'win32':
            startupinfo = subprocess.STARTUPINFO()
            startupinfo.dwFlags |= subprocess.STARTF_USESHOWWINDOW
            startupinfo.wShowWindow = subprocess.SW_HIDE

            kwargs['startupinfo'] = startupinfo
            kwargs['creationflags'] = subprocess.CREATE_NO_WINDOW

        return kwargs

    def run_helper(self) -> Optional[dict]:
        """Run the helper and parse its output.

        Returns:
            Parsed JSON object, or None if nothing is playing

        Raises:
            SourceError: If the helper fails or prints invalid JSON
        """
        cmd = [self.command] + self.arguments

        try:
            self.logger.debug(f"Running command: {' '.join(cmd)}")
            result = subprocess.run(cmd, **self._get_subprocess_kwargs())
        except subprocess.TimeoutExpired as e:
            raise SourceError(f"{self.command} timed out after {self.timeout}s") from e
        except OSError as e:
            raise SourceError(f"cannot run {self.command}: {e}") from e

        if result.returncode != 0:
            raise SourceError(
                f"{self.command} exited with status {result.returncode}: {result.stderr.strip()}"
            )

        try:
            return json.loads(result.stdout or "null")
        except json.JSONDecodeError as e:
            raise SourceError(f"invalid JSON from {self.command}: {e}") from e

    def get_snapshots(
        self,
        blacklist: List[Pattern],
        rules: List[NormalizationRule]
    ) -> Dict[str, PlaybackSnapshot]:
        """Return the system-wide now-playing player, if any.

        Args:
            blacklist: Compiled player blacklist, matched against the bundle identifier
            rules: Normalization rules

        Returns:
            Dictionary mapping ``media-control:<bundle identifier>`` to snapshot
        """
        info = self.run_helper()
        if not info:
            return {}

        player = info.get("bundleIdentifier") or "unknown"

        try:
            snapshot = snapshot_from_media_control(info, datetime.now(timezone.utc))
        except (TypeError, ValueError) as e:
            raise SourceError(f"error parsing {self.command} output for {player}: {e}") from e

        return {
            f"{self.name}:{name}": found
            for name, found in select_players({player: snapshot}, blacklist, rules).items()
        }
