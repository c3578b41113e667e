"""Tests for wiring the service together."""

from playback_scrobbler.config.settings import (
    CsvConfig,
    DBusSourceConfig,
    MediaControlSourceConfig,
    NotificationConfig,
    Settings,
    SinksConfig,
    SourcesConfig,
)
from playback_scrobbler.service import ScrobblerService


def test_build(tmp_path, mocker):
    settings = Settings(
        blacklist=["firefox"],
        notifications=NotificationConfig(enabled=False, on_scrobble=True),
        sources=SourcesConfig(
            dbus=DBusSourceConfig(enabled=False),
            media_control=MediaControlSourceConfig(enabled=True),
        ),
        sinks=SinksConfig(csv=CsvConfig(filename=tmp_path / "scrobbles.csv")),
    )
    settings.logging.path = tmp_path / "scrobbler.log"
    path = tmp_path / "config.yaml"
    settings.save(path)

    service = ScrobblerService(config_path=path)
    engine = service.build()

    assert [source.name for source in engine.sources] == ["media-control"]
    assert [sink.name for sink in engine.sinks] == ["csv"]
    assert [pattern.pattern for pattern in engine.blacklist] == ["firefox"]
    assert engine.notify_on_scrobble is True
    assert service.notifier.enabled is False
    assert (tmp_path / "scrobbler.log").exists()
