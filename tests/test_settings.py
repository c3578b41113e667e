"""Tests for YAML settings."""

import stat
from pathlib import Path

import pytest

from playback_scrobbler.config.settings import (
    DEFAULT_MIN_PLAYBACK_DURATION,
    DEFAULT_MIN_PLAYBACK_PERCENT,
    DEFAULT_POLL_INTERVAL,
    LastFmConfig,
    MediaControlSourceConfig,
    Settings,
    default_config_path,
)
from playback_scrobbler.errors import ConfigError

EXAMPLE_CONFIG = """
poll_interval: 5
min_playback_duration: 180
min_playback_percent: 60
blacklist:
  - firefox
  - chromium
regexes:
  - match: ' - Topic$'
    replace: ''
    artist: true
notifications:
  on_scrobble: true
sources:
  dbus:
    enabled: false
  media_control:
    enabled: true
    command: /usr/local/bin/media-control
sinks:
  lastfm:
    key: api-key
    secret: api-secret
  csv:
    filename: ~/scrobbles.csv
logging:
  level: DEBUG
"""


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults(isolated_config_dir):
    settings = Settings()

    assert settings.poll_interval == DEFAULT_POLL_INTERVAL
    assert settings.min_playback_duration == 240
    assert settings.min_playback_percent == 50
    assert settings.blacklist == []
    assert settings.regexes == []
    assert settings.notifications.enabled is True
    assert settings.notifications.on_scrobble is False
    assert settings.notifications.on_error is True
    assert settings.sinks.lastfm is None
    assert settings.sinks.csv is None
    assert settings.logging.path == isolated_config_dir / "scrobbler.log"


@pytest.mark.parametrize(
    "field_name, value, expected",
    [
        ("poll_interval", 0, DEFAULT_POLL_INTERVAL),
        ("poll_interval", -3, DEFAULT_POLL_INTERVAL),
        ("min_playback_duration", 0, DEFAULT_MIN_PLAYBACK_DURATION),
        ("min_playback_percent", 0, DEFAULT_MIN_PLAYBACK_PERCENT),
        ("min_playback_percent", 101, DEFAULT_MIN_PLAYBACK_PERCENT),
        ("min_playback_percent", 100, 100),
    ],
)
def test_out_of_range_values_are_clamped(field_name, value, expected):
    settings = Settings(**{field_name: value})

    assert getattr(settings, field_name) == expected


def test_from_file(tmp_path):
    settings = Settings.from_file(write_config(tmp_path, EXAMPLE_CONFIG))

    assert settings.poll_interval == 5
    assert settings.min_playback_duration == 180
    assert settings.min_playback_percent == 60
    assert settings.blacklist == ["firefox", "chromium"]
    assert settings.regexes[0].match == " - Topic$"
    assert settings.regexes[0].artist is True
    assert settings.regexes[0].track is False
    assert settings.notifications.on_scrobble is True
    assert settings.notifications.on_error is True
    assert settings.sources.dbus.enabled is False
    assert settings.sources.media_control.command == "/usr/local/bin/media-control"
    assert settings.sources.media_control.arguments == ["get"]
    assert settings.sinks.lastfm == LastFmConfig(key="api-key", secret="api-secret")
    assert settings.sinks.csv.filename == Path("~/scrobbles.csv").expanduser()
    assert settings.logging.level == "DEBUG"


def test_empty_file_gives_defaults(tmp_path):
    settings = Settings.from_file(write_config(tmp_path, ""))

    assert settings == Settings()


def test_empty_sink_section_enables_sink(tmp_path, isolated_config_dir):
    settings = Settings.from_file(write_config(tmp_path, "sinks:\n  csv: {}\n"))

    assert settings.sinks.csv.filename == isolated_config_dir / "scrobbles.csv"
    assert settings.sinks.lastfm is None


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Settings.from_file(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "text",
    [
        "poll_interval: [unclosed",
        "- just\n- a list\n",
        "notifications:\n  loud: true\n",
        "logging:\n  level: CHATTY\n",
        "sources:\n  media_control:\n    timeout: 0\n",
    ],
)
def test_invalid_config_raises(tmp_path, text):
    with pytest.raises(ConfigError):
        Settings.from_file(write_config(tmp_path, text))


def test_media_control_timeout_validation():
    with pytest.raises(ConfigError):
        MediaControlSourceConfig(timeout=0)


def test_from_file_or_default_falls_back_on_errors(tmp_path):
    path = write_config(tmp_path, "logging:\n  level: CHATTY\n")

    assert Settings.from_file_or_default(path) == Settings()


def test_from_file_or_default_without_file(isolated_config_dir):
    assert not default_config_path().exists()
    assert Settings.from_file_or_default() == Settings()


def test_save_and_reload(tmp_path):
    settings = Settings.from_file(write_config(tmp_path, EXAMPLE_CONFIG))
    settings.sinks.lastfm.session_key = "session"
    settings.sinks.lastfm.username = "listener"
    path = tmp_path / "saved" / "config.yaml"

    settings.save(path)

    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert Settings.from_file(path) == settings


def test_save_defaults_to_config_dir(isolated_config_dir):
    Settings().save()

    assert (isolated_config_dir / "config.yaml").exists()
