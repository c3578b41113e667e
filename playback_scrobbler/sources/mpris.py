"""MPRIS players on the D-Bus session bus (Linux)."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Mapping, Pattern

from ..core.normalizer import NormalizationRule, is_blacklisted, select_players
from ..errors import SourceError
from ..models.playback import PlaybackSnapshot, PlaybackState

try:
    import dbus
    DBUS_AVAILABLE = True
except ImportError:
    DBUS_AVAILABLE = False

MPRIS_PREFIX = "org.mpris.MediaPlayer2."
MPRIS_PATH = "/org/mpris/MediaPlayer2"
PLAYER_INTERFACE = "org.mpris.MediaPlayer2.Player"
PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"


def _microseconds(value) -> timedelta:
    return timedelta(microseconds=int(value))


def snapshot_from_mpris(
    metadata: Mapping,
    playback_status: str,
    position,
    captured_at: datetime
) -> PlaybackSnapshot:
    """Build a snapshot from MPRIS player properties.

    Args:
        metadata: The player's ``Metadata`` property
        playback_status: The player's ``PlaybackStatus`` property
        position: The player's ``Position`` property in microseconds
        captured_at: When the properties were read

    Returns:
        PlaybackSnapshot instance

    Raises:
        KeyError: If a required metadata entry is missing
        ValueError: If an entry has an unexpected type or value
    """
    artists = metadata["xesam:artist"]
    if isinstance(artists, str):
        artists = [artists]

    return PlaybackSnapshot(
        artists=[str(artist) for artist in artists],
        track=str(metadata["xesam:title"]),
        album=str(metadata["xesam:album"]),
        duration=_microseconds(metadata["mpris:length"]),
        timestamp=captured_at,
        state=PlaybackState(str(playback_status)),
        position=_microseconds(position)
    )


class MprisSource:
    """Reads now-playing information from every MPRIS player."""

    name = "dbus"

    def __init__(self, logger: logging.Logger):
        """Initialize source.

        Args:
            logger: Logger instance

        Raises:
            SourceError: If dbus-python is not installed
        """
        if not DBUS_AVAILABLE:
            raise SourceError("dbus-python is not installed, cannot read MPRIS players")
        self.logger = logger

    def _read_player(self, bus, bus_name: str) -> PlaybackSnapshot:
        player = bus.get_object(bus_name, MPRIS_PATH)
        properties = dbus.Interface(player, PROPERTIES_INTERFACE)

        metadata = properties.Get(PLAYER_INTERFACE, "Metadata")
        status = properties.Get(PLAYER_INTERFACE, "PlaybackStatus")
        position = properties.Get(PLAYER_INTERFACE, "Position")

        return snapshot_from_mpris(metadata, status, position, datetime.now(timezone.utc))

    def get_snapshots(
        self,
        blacklist: List[Pattern],
        rules: List[NormalizationRule]
    ) -> Dict[str, PlaybackSnapshot]:
        """Query all MPRIS players that are not blacklisted.

        Args:
            blacklist: Compiled player blacklist
            rules: Normalization rules

        Returns:
            Dictionary mapping ``dbus:<bus name>`` to snapshot

        Raises:
            SourceError: If the session bus cannot be queried
        """
        try:
            bus = dbus.SessionBus()
            names = [str(name) for name in bus.list_names()]
        except dbus.DBusException as e:
            raise SourceError(f"cannot list D-Bus names: {e}") from e

        raw: Dict[str, PlaybackSnapshot] = {}
        try:
            for bus_name in names:
                if not bus_name.startswith(MPRIS_PREFIX) or is_blacklisted(blacklist, bus_name):
                    continue

                try:
                    raw[bus_name] = self._read_player(bus, bus_name)
                except dbus.DBusException as e:
                    self.logger.error(f"Error reading D-Bus properties for player {bus_name}: {e}")
                except (KeyError, TypeError, ValueError) as e:
                    self.logger.warning(f"Error parsing metadata for player {bus_name}: {e}")
        finally:
            bus.close()

        return {
            f"{self.name}:{bus_name}": snapshot
            for bus_name, snapshot in select_players(raw, blacklist, rules).items()
        }
