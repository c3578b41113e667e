"""last.fm sink backed by pylast."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

import pylast

from ..errors import SinkError
from ..models.playback import Scrobble

# last.fm rejects durations shorter than 30 seconds
MIN_SUBMITTED_DURATION = 30


# Subclasses so callers can branch
class LastFMAuthError(SinkError): ...
class LastFMRateLimitError(SinkError): ...
class LastFMNetworkError(SinkError): ...
class LastFMUnknownError(SinkError): ...


def _translate_error(e: Exception) -> SinkError:
    """Map pylast exceptions to sink errors."""
    if isinstance(e, pylast.WSError):
        code = e.get_id()
        # 9=Invalid session, 4=Auth failed, 14=Token expired
        if code in ("4", "9", "14"):
            return LastFMAuthError(str(e))
        # 29=Rate limit exceeded
        if code == "29":
            return LastFMRateLimitError(str(e))
        return LastFMUnknownError(f"last.fm API error {code}: {e}")
    if isinstance(e, (pylast.NetworkError, pylast.MalformedResponseError)):
        return LastFMNetworkError(str(e))
    return LastFMUnknownError(str(e))


class LastFmSink:
    """Sends now-playing updates and scrobbles to last.fm."""

    name = "last.fm"

    def __init__(
        self,
        logger: logging.Logger,
        api_key: str,
        api_secret: str,
        session_key: Optional[str],
        username: Optional[str]
    ):
        """Initialize sink.

        Args:
            logger: Logger instance
            api_key: last.fm API key
            api_secret: last.fm shared secret
            session_key: Session key from ``lastfm-auth``
            username: last.fm username from ``lastfm-auth``

        Raises:
            SinkError: If the sink is not authenticated yet
        """
        if not session_key or not username:
            raise SinkError("last.fm sink is configured, but not authenticated (run lastfm-auth)")

        self.logger = logger
        self.api_key = api_key
        self.api_secret = api_secret
        self.session_key = session_key
        self.username = username
        self._network: Optional[pylast.LastFMNetwork] = None

    @property
    def network(self) -> pylast.LastFMNetwork:
        if self._network is None:
            self.logger.debug("Creating last.fm network session")
            self._network = pylast.LastFMNetwork(
                api_key=self.api_key,
                api_secret=self.api_secret,
                session_key=self.session_key,
                username=self.username,
            )
        return self._network

    @staticmethod
    def _submitted_duration(scrobble: Scrobble) -> int:
        return max(int(scrobble.duration.total_seconds()), MIN_SUBMITTED_DURATION)

    def now_playing(self, scrobble: Scrobble) -> None:
        try:
            self.network.update_now_playing(
                artist=scrobble.join_artists(),
                title=scrobble.track,
                album=scrobble.album,
                duration=self._submitted_duration(scrobble),
            )
        except Exception as e:
            raise _translate_error(e) from e

    def scrobble(self, scrobble: Scrobble) -> None:
        """Submit a scrobble with the track's start time (unix seconds)."""
        try:
            self.network.scrobble(
                artist=scrobble.join_artists(),
                title=scrobble.track,
                timestamp=int(scrobble.timestamp.timestamp()),
                album=scrobble.album,
                duration=self._submitted_duration(scrobble),
            )
        except Exception as e:
            raise _translate_error(e) from e

    def get_scrobbles(self, limit: int, time_from: datetime, time_to: datetime) -> List[Scrobble]:
        """Fetch the user's scrobbles, newest first.

        Args:
            limit: Maximum number of scrobbles
            time_from: Only scrobbles after this time
            time_to: Only scrobbles before this time

        Returns:
            List of Scrobble objects (duration is not reported by last.fm)
        """
        try:
            played = self.network.get_user(self.username).get_recent_tracks(
                limit=limit,
                time_from=int(time_from.timestamp()),
                time_to=int(time_to.timestamp()),
            )
        except Exception as e:
            raise _translate_error(e) from e

        scrobbles = []
        for item in played:
            scrobbles.append(Scrobble(
                artists=[item.track.artist.name],
                track=item.track.title,
                album=item.album or "",
                timestamp=datetime.fromtimestamp(int(item.timestamp), tz=timezone.utc),
            ))
        return scrobbles[:limit]


def create_session(api_key: str, api_secret: str, confirm) -> tuple:
    """Run the last.fm web authentication flow.

    Args:
        api_key: last.fm API key
        api_secret: last.fm shared secret
        confirm: Called with the authorization URL; returns True once the
            user has authorized the application

    Returns:
        Tuple of (session_key, username), or None if the user cancelled

    Raises:
        SinkError: If last.fm refuses to issue a session
    """
    network = pylast.LastFMNetwork(api_key=api_key, api_secret=api_secret)
    generator = pylast.SessionKeyGenerator(network)

    try:
        url = generator.get_web_auth_url()
        if not confirm(url):
            return None
        return generator.get_web_auth_session_key_username(url)
    except Exception as e:
        raise _translate_error(e) from e
