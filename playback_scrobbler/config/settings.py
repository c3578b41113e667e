"""Configuration management for Playback Scrobbler."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from ..errors import ConfigError
from ..utils.platform import get_config_dir, is_linux, is_macos

DEFAULT_POLL_INTERVAL = 2
# https://www.last.fm/api/scrobbling#when-is-a-scrobble-a-scrobble
DEFAULT_MIN_PLAYBACK_DURATION = 4 * 60
DEFAULT_MIN_PLAYBACK_PERCENT = 50


@dataclass
class RegexConfig:
    """A match/replace rule applied to track metadata."""

    match: str = ""
    replace: str = ""
    artist: bool = False
    track: bool = False
    album: bool = False


@dataclass
class NotificationConfig:
    """Notification configuration."""

    enabled: bool = True
    on_scrobble: bool = False
    on_error: bool = True


@dataclass
class DBusSourceConfig:
    """MPRIS players over D-Bus (Linux)."""

    enabled: bool = field(default_factory=is_linux)


@dataclass
class MediaControlSourceConfig:
    """External ``media-control`` helper (macOS)."""

    enabled: bool = field(default_factory=is_macos)
    command: str = "media-control"
    arguments: List[str] = field(default_factory=lambda: ["get"])
    timeout: int = 5

    def __post_init__(self):
        """Validate configuration."""
        if self.timeout < 1:
            raise ConfigError("media_control.timeout must be >= 1 second")


@dataclass
class SourcesConfig:
    """Source configuration."""

    dbus: DBusSourceConfig = field(default_factory=DBusSourceConfig)
    media_control: MediaControlSourceConfig = field(default_factory=MediaControlSourceConfig)

    @classmethod
    def from_dict(cls, data: dict) -> 'SourcesConfig':
        return cls(
            dbus=DBusSourceConfig(**(data.get('dbus') or {})),
            media_control=MediaControlSourceConfig(**(data.get('media_control') or {})),
        )


@dataclass
class LastFmConfig:
    """last.fm credentials; session_key and username are filled in by ``lastfm-auth``."""

    key: str = ""
    secret: str = ""
    session_key: str = ""
    username: str = ""


@dataclass
class CsvConfig:
    """Local CSV file configuration."""

    filename: Optional[Path] = None

    def __post_init__(self):
        """Set default file if not specified."""
        if self.filename is None:
            self.filename = get_config_dir() / 'scrobbles.csv'
        elif isinstance(self.filename, str):
            self.filename = Path(self.filename).expanduser()


@dataclass
class SinksConfig:
    """Sink configuration. A sink is enabled by having a section."""

    lastfm: Optional[LastFmConfig] = None
    csv: Optional[CsvConfig] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'SinksConfig':
        return cls(
            lastfm=LastFmConfig(**data['lastfm']) if data.get('lastfm') is not None else None,
            csv=CsvConfig(**data['csv']) if data.get('csv') is not None else None,
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    path: Optional[Path] = None
    level: str = "INFO"
    max_size_mb: int = 10
    backup_count: int = 5

    def __post_init__(self):
        """Validate configuration and set defaults."""
        if self.path is None:
            self.path = get_config_dir() / 'scrobbler.log'
        elif isinstance(self.path, str):
            self.path = Path(self.path).expanduser()

        # Validate log level
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.level.upper() not in valid_levels:
            raise ConfigError(f"level must be one of {valid_levels}")


@dataclass
class Settings:
    """Main settings container."""

    poll_interval: int = DEFAULT_POLL_INTERVAL
    min_playback_duration: int = DEFAULT_MIN_PLAYBACK_DURATION
    min_playback_percent: int = DEFAULT_MIN_PLAYBACK_PERCENT
    blacklist: List[str] = field(default_factory=list)
    regexes: List[RegexConfig] = field(default_factory=list)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    sinks: SinksConfig = field(default_factory=SinksConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Clamp out-of-range values."""
        self.validate()

    def validate(self) -> None:
        """Replace out-of-range numbers with their defaults, warning about each."""
        if self.poll_interval <= 0:
            logging.warning(
                f"Invalid poll_interval {self.poll_interval}, using {DEFAULT_POLL_INTERVAL}"
            )
            self.poll_interval = DEFAULT_POLL_INTERVAL

        if self.min_playback_duration <= 0:
            logging.warning(
                f"Invalid min_playback_duration {self.min_playback_duration}, "
                f"using {DEFAULT_MIN_PLAYBACK_DURATION}"
            )
            self.min_playback_duration = DEFAULT_MIN_PLAYBACK_DURATION

        if not (0 < self.min_playback_percent <= 100):
            logging.warning(
                f"Invalid min_playback_percent {self.min_playback_percent}, "
                f"using {DEFAULT_MIN_PLAYBACK_PERCENT}"
            )
            self.min_playback_percent = DEFAULT_MIN_PLAYBACK_PERCENT

    @classmethod
    def from_dict(cls, data: dict) -> 'Settings':
        """Create settings from parsed YAML.

        Raises:
            ConfigError: If a section has unknown keys or invalid values
        """
        try:
            return cls(
                poll_interval=data.get('poll_interval', DEFAULT_POLL_INTERVAL),
                min_playback_duration=data.get('min_playback_duration', DEFAULT_MIN_PLAYBACK_DURATION),
                min_playback_percent=data.get('min_playback_percent', DEFAULT_MIN_PLAYBACK_PERCENT),
                blacklist=list(data.get('blacklist') or []),
                regexes=[RegexConfig(**entry) for entry in (data.get('regexes') or [])],
                notifications=NotificationConfig(**(data.get('notifications') or {})),
                sources=SourcesConfig.from_dict(data.get('sources') or {}),
                sinks=SinksConfig.from_dict(data.get('sinks') or {}),
                logging=LoggingConfig(**(data.get('logging') or {})),
            )
        except TypeError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_file(cls, config_path: Path) -> 'Settings':
        """Load settings from YAML file.

        Args:
            config_path: Path to configuration file

        Returns:
            Settings instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping at the top of {config_path}")

        settings = cls.from_dict(data)

        if settings.sinks.lastfm is None and settings.sinks.csv is None:
            logging.warning("No sinks configured, this is probably not what you want")

        return settings

    @classmethod
    def from_file_or_default(cls, config_path: Optional[Path] = None) -> 'Settings':
        """Load settings from file or return defaults.

        Args:
            config_path: Path to configuration file (optional)

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = default_config_path()

        if config_path.exists():
            try:
                return cls.from_file(config_path)
            except Exception as e:
                logging.warning(f"Failed to load config from {config_path}: {e}")
                logging.warning("Using default configuration")
                return cls()
        else:
            logging.info(f"Config file not found at {config_path}, using defaults")
            return cls()

    def to_dict(self) -> dict:
        """Convert to plain types for YAML serialization."""
        lastfm = self.sinks.lastfm
        csv = self.sinks.csv

        return {
            'poll_interval': self.poll_interval,
            'min_playback_duration': self.min_playback_duration,
            'min_playback_percent': self.min_playback_percent,
            'blacklist': list(self.blacklist),
            'regexes': [
                {
                    'match': rule.match,
                    'replace': rule.replace,
                    'artist': rule.artist,
                    'track': rule.track,
                    'album': rule.album
                }
                for rule in self.regexes
            ],
            'notifications': {
                'enabled': self.notifications.enabled,
                'on_scrobble': self.notifications.on_scrobble,
                'on_error': self.notifications.on_error
            },
            'sources': {
                'dbus': {
                    'enabled': self.sources.dbus.enabled
                },
                'media_control': {
                    'enabled': self.sources.media_control.enabled,
                    'command': self.sources.media_control.command,
                    'arguments': list(self.sources.media_control.arguments),
                    'timeout': self.sources.media_control.timeout
                }
            },
            'sinks': {
                'lastfm': {
                    'key': lastfm.key,
                    'secret': lastfm.secret,
                    'session_key': lastfm.session_key,
                    'username': lastfm.username
                } if lastfm else None,
                'csv': {
                    'filename': str(csv.filename) if csv.filename else None
                } if csv else None
            },
            'logging': {
                'path': str(self.logging.path) if self.logging.path else None,
                'level': self.logging.level,
                'max_size_mb': self.logging.max_size_mb,
                'backup_count': self.logging.backup_count
            }
        }

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save settings to YAML file, readable by the owner only.

        Args:
            config_path: Path to save configuration (default: config.yaml in config dir)
        """
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        # may contain a last.fm session key
        fd = os.open(config_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False, indent=2)
        os.chmod(config_path, 0o600)


def default_config_path() -> Path:
    return get_config_dir() / 'config.yaml'
