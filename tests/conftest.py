"""Shared fixtures and fakes for the scrobbler tests."""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from playback_scrobbler.core.normalizer import select_players
from playback_scrobbler.errors import SinkError, SourceError
from playback_scrobbler.models.playback import PlaybackSnapshot, PlaybackState

CAPTURED_AT = datetime(2023, 11, 5, 22, 58, tzinfo=timezone.utc)


def make_snapshot(**overrides) -> PlaybackSnapshot:
    values = dict(
        artists=["Placebo", "David Bowie"],
        track="Without You I'm Nothing",
        album="A Place For Us To Dream",
        duration=timedelta(seconds=251),
        timestamp=CAPTURED_AT,
        state=PlaybackState.PLAYING,
        position=timedelta(seconds=110),
    )
    values.update(overrides)
    return PlaybackSnapshot(**values)


class FakeSource:
    """Reports a fixed set of players; can fail while still returning them."""

    def __init__(self, name="fake", snapshots=None, error=False):
        self.name = name
        self.snapshots = snapshots or {}
        self.error = error
        self.calls = 0

    def get_snapshots(self, blacklist, rules):
        self.calls += 1
        found = select_players(
            {player: snapshot.copy() for player, snapshot in self.snapshots.items()},
            blacklist,
            rules
        )
        if self.error:
            raise SourceError("fake error", partial=found)
        return found


class FakeSink:
    """Records every event; raises SinkError while ``error`` is set."""

    def __init__(self, name="fake sink", error=False):
        self.name = name
        self.error = error
        self.now_playing_log = []
        self.scrobble_log = []

    def now_playing(self, scrobble):
        if self.error:
            raise SinkError("fake error")
        self.now_playing_log.append(scrobble)

    def scrobble(self, scrobble):
        if self.error:
            raise SinkError("fake error")
        self.scrobble_log.append(scrobble)

    def get_scrobbles(self, limit, time_from, time_to):
        return list(reversed(self.scrobble_log))[:limit]


class FakeNotifier:
    """Counts notifications and hands out increasing ids."""

    def __init__(self, error=False):
        self.error = error
        self.sent = []

    @property
    def count(self):
        return len(self.sent)

    def notify(self, replace_id, summary, body):
        if self.error:
            raise RuntimeError("notification daemon gone")
        self.sent.append((replace_id, summary, body))
        return replace_id or len(self.sent)


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Keep default config and data paths inside the test directory."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return config_home / "playback-scrobbler"


@pytest.fixture
def logger():
    return logging.getLogger("scrobbler_tests")


@pytest.fixture
def snapshot():
    return make_snapshot()
