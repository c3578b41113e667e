"""Local CSV file sink."""

import csv
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List

from ..errors import SinkError
from ..models.playback import Scrobble

# artist names may contain commas ("Tyler, the Creator")
ARTIST_SEPARATOR = "; "


def scrobble_to_row(scrobble: Scrobble) -> List[str]:
    """Columns: artists, track, album, duration in ms, ISO 8601 start time."""
    return [
        ARTIST_SEPARATOR.join(scrobble.artists),
        scrobble.track,
        scrobble.album,
        str(int(scrobble.duration.total_seconds() * 1000)),
        scrobble.timestamp.isoformat() if scrobble.timestamp else "",
    ]


def scrobble_from_row(row: List[str]) -> Scrobble:
    """Parse a row written by ``scrobble_to_row``.

    Raises:
        ValueError: If the row is malformed
    """
    if len(row) != 5:
        raise ValueError(f"expected 5 columns, got {len(row)}")

    artists, track, album, millis, timestamp = row

    parsed = datetime.fromisoformat(timestamp)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return Scrobble(
        artists=artists.split(ARTIST_SEPARATOR) if artists else [],
        track=track,
        album=album,
        duration=timedelta(milliseconds=int(millis)),
        timestamp=parsed,
    )


class CsvSink:
    """Appends scrobbles to a CSV file."""

    name = "csv"

    def __init__(self, logger: logging.Logger, filename: Path):
        """Initialize sink.

        Args:
            logger: Logger instance
            filename: CSV file, created on the first scrobble
        """
        self.logger = logger
        self.filename = Path(filename).expanduser()

    def now_playing(self, scrobble: Scrobble) -> None:
        pass

    def scrobble(self, scrobble: Scrobble) -> None:
        try:
            self.filename.parent.mkdir(parents=True, exist_ok=True)
            with open(self.filename, 'a', encoding='utf-8', newline='') as f:
                csv.writer(f).writerow(scrobble_to_row(scrobble))
        except OSError as e:
            raise SinkError(f"cannot write {self.filename}: {e}") from e

    def get_scrobbles(self, limit: int, time_from: datetime, time_to: datetime) -> List[Scrobble]:
        """Read scrobbles from the file, newest first.

        Args:
            limit: Maximum number of scrobbles
            time_from: Only scrobbles after this time
            time_to: Only scrobbles before this time

        Returns:
            List of Scrobble objects

        Raises:
            SinkError: If the file cannot be read or holds a malformed row
        """
        self.logger.debug(f"Reading scrobbles from {self.filename}")

        try:
            with open(self.filename, 'r', encoding='utf-8', newline='') as f:
                rows = list(csv.reader(f))
        except OSError as e:
            raise SinkError(f"cannot read {self.filename}: {e}") from e

        scrobbles = []
        for line_number in range(len(rows), 0, -1):
            row = rows[line_number - 1]
            if not row:
                continue

            try:
                scrobble = scrobble_from_row(row)
            except ValueError as e:
                raise SinkError(f"{self.filename}:{line_number}: {e}") from e

            if scrobble.timestamp < time_from or scrobble.timestamp > time_to:
                continue

            scrobbles.append(scrobble)
            if len(scrobbles) >= limit:
                break

        return scrobbles
