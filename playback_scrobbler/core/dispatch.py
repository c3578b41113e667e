"""Delivery of now-playing updates and scrobbles to sinks."""

import logging
from typing import Optional

from ..models.playback import Scrobble
from ..sinks.base import Sink
from .notifier import NotifierProtocol, notify_safely


def send_now_playing(
    player: str,
    sink: Sink,
    scrobble: Scrobble,
    notify_on_error: bool,
    notifier: Optional[NotifierProtocol],
    logger: logging.Logger
) -> bool:
    """Send a now-playing update to one sink.

    Never raises: a failing sink is logged (and optionally reported with a
    notification) so the remaining sinks still get called.

    Returns:
        True if the sink accepted the update
    """
    try:
        sink.now_playing(scrobble)
    except Exception as e:
        logger.error(f"[{player}] error updating now playing status on {sink.name}: {e}")
        if notify_on_error:
            notify_safely(
                notifier,
                logger,
                0,
                f"Error updating now playing status on {sink.name}",
                str(e)
            )
        return False

    logger.info(f"[{player}] updated now playing status on {sink.name}")
    return True


def send_scrobble(
    player: str,
    sink: Sink,
    scrobble: Scrobble,
    notify_on_error: bool,
    notifier: Optional[NotifierProtocol],
    logger: logging.Logger
) -> bool:
    """Send a scrobble to one sink.

    Returns:
        True if the sink recorded the scrobble
    """
    try:
        sink.scrobble(scrobble)
    except Exception as e:
        logger.error(f"[{player}] error scrobbling to {sink.name}: {e}")
        if notify_on_error:
            notify_safely(
                notifier,
                logger,
                0,
                f"Error scrobbling to {sink.name}",
                str(e)
            )
        return False

    logger.info(f"[{player}] scrobbled {scrobble.describe()} to {sink.name}")
    return True
