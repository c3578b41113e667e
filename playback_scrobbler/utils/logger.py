"""Logging configuration for Playback Scrobbler."""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import coloredlogs

# Libraries that log every tick or every HTTP request at INFO
NOISY_LOGGERS = ("apscheduler", "pylast", "httpx", "httpcore")

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(asctime)s %(levelname)-8s %(message)s'


class JsonFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, message (and exception)."""

    def format(self, record):
        entry = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _file_handler(log_file: Path, max_size_mb: int, backup_count: int) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


def _console_handler(json_format: bool = False) -> logging.Handler:
    # stdout is left for command output
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        formatter = JsonFormatter()
    elif sys.stderr.isatty():
        formatter = coloredlogs.ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt='%H:%M:%S')
    else:
        formatter = logging.Formatter(fmt=CONSOLE_FORMAT, datefmt='%H:%M:%S')
    handler.setFormatter(formatter)
    return handler


def setup_logger(
    name: str = "playback_scrobbler",
    log_file: Optional[Path] = None,
    level: str = "INFO",
    max_size_mb: int = 10,
    backup_count: int = 5,
    console: bool = True,
    json_format: bool = False
) -> logging.Logger:
    """Configure the application logger.

    Args:
        name: Logger name
        log_file: Rotating log file (if None, no file logging)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        max_size_mb: Maximum log file size in MB before rotation
        backup_count: Number of rotated files to keep
        console: Whether to log to stderr
        json_format: Log to stderr as JSON lines instead of text

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)
    logger.handlers.clear()
    logger.propagate = False

    if log_file:
        logger.addHandler(_file_handler(log_file, max_size_mb, backup_count))
    if console:
        logger.addHandler(_console_handler(json_format))

    library_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(library_level)

    return logger
