"""Scrobble sinks for Playback Scrobbler."""

import logging
from typing import List

from ..errors import SinkError
from .base import Sink
from .csv_file import CsvSink
from .lastfm import LastFmSink

__all__ = ["CsvSink", "LastFmSink", "Sink", "build_sinks"]


def build_sinks(settings, logger: logging.Logger) -> List[Sink]:
    """Create the sinks configured in the settings.

    Sinks that cannot be set up (e.g. last.fm without a session) are logged
    and left out.
    """
    sinks: List[Sink] = []

    lastfm = settings.sinks.lastfm
    if lastfm is not None:
        try:
            sinks.append(LastFmSink(
                logger,
                api_key=lastfm.key,
                api_secret=lastfm.secret,
                session_key=lastfm.session_key,
                username=lastfm.username
            ))
        except SinkError as e:
            logger.error(f"Cannot set up last.fm sink: {e}")

    if settings.sinks.csv is not None:
        sinks.append(CsvSink(logger, settings.sinks.csv.filename))

    return sinks
