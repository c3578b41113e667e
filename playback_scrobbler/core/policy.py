"""Minimum playback time before a track counts as scrobbled."""

from datetime import timedelta

from ..errors import InvalidDuration


def min_play_time(duration: timedelta, min_duration: int, min_percent: int) -> timedelta:
    """Return how long a track has to play before it can be scrobbled.

    The lower of ``min_duration`` seconds and ``min_percent`` of the track,
    so short tracks only need the percentage.

    Args:
        duration: Track length
        min_duration: Absolute threshold in seconds
        min_percent: Relative threshold in percent of the track length

    Returns:
        Minimum playback time

    Raises:
        InvalidDuration: If the duration is negative
    """
    if duration < timedelta(0):
        raise InvalidDuration(f"invalid track length: {duration}")

    fraction = duration * min_percent / 100
    return min(timedelta(seconds=min_duration), fraction)


def format_duration(duration: timedelta) -> str:
    if duration < timedelta(0):
        return "invalid duration"

    minutes, seconds = divmod(int(duration.total_seconds()), 60)
    return f"{minutes:02d}:{seconds:02d}"
