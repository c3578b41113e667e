"""Cross-platform notification system."""

import logging
import sys
from typing import Optional, Protocol

from ..errors import NotificationError

try:
    from plyer import notification as plyer_notification
    PLYER_AVAILABLE = True
except ImportError:
    PLYER_AVAILABLE = False

# Linux desktop notifications with replace-id support
if sys.platform.startswith('linux'):
    try:
        import dbus
        DBUS_AVAILABLE = True
    except ImportError:
        DBUS_AVAILABLE = False
else:
    DBUS_AVAILABLE = False

# Windows-specific notification support
if sys.platform == 'win32':
    try:
        from winotify import Notification as WinNotification
        WINOTIFY_AVAILABLE = True
    except ImportError:
        WINOTIFY_AVAILABLE = False
else:
    WINOTIFY_AVAILABLE = False


class NotifierProtocol(Protocol):
    def notify(self, replace_id: int, summary: str, body: str) -> int:
        ...


class Notifier:
    """Cross-platform desktop notification handler.

    ``notify`` returns the id of the shown notification. Passing that id back
    as ``replace_id`` updates the notification in place where the backend
    supports it (freedesktop notifications); other backends return 0.
    """

    def __init__(
        self,
        logger: logging.Logger,
        enabled: bool = True,
        app_name: str = "playback-scrobbler"
    ):
        """Initialize notifier.

        Args:
            logger: Logger instance
            enabled: Whether notifications are enabled
            app_name: Application name for notifications
        """
        self.logger = logger
        self.enabled = enabled
        self.app_name = app_name

        # Check which notification backend is available
        self.backend = self._detect_backend()

        if not self.backend and self.enabled:
            self.logger.warning("No notification backend available, notifications disabled")
            self.enabled = False

    def _detect_backend(self) -> Optional[str]:
        """Detect available notification backend.

        Returns:
            Backend name ('dbus', 'winotify', 'plyer', or None)
        """
        if DBUS_AVAILABLE:
            self.logger.debug("Using freedesktop notifications over D-Bus")
            return 'dbus'
        elif sys.platform == 'win32' and WINOTIFY_AVAILABLE:
            self.logger.debug("Using winotify for notifications")
            return 'winotify'
        elif PLYER_AVAILABLE:
            self.logger.debug("Using plyer for notifications")
            return 'plyer'
        else:
            self.logger.debug("No notification backend available")
            return None

    def notify(self, replace_id: int, summary: str, body: str) -> int:
        """Show a desktop notification.

        Args:
            replace_id: Id of a notification to replace, 0 for a new one
            summary: Notification title
            body: Notification message

        Returns:
            Id of the shown notification (0 when unknown or disabled)

        Raises:
            NotificationError: If the backend fails
        """
        if not self.enabled:
            return 0

        try:
            if self.backend == 'dbus':
                return self._send_dbus(replace_id, summary, body)
            elif self.backend == 'winotify':
                self._send_winotify(summary, body)
            elif self.backend == 'plyer':
                self._send_plyer(summary, body)
            return 0

        except Exception as e:
            raise NotificationError(f"{self.backend} notification failed: {e}") from e

    def _send_dbus(self, replace_id: int, summary: str, body: str) -> int:
        """Send notification using org.freedesktop.Notifications."""
        bus = dbus.SessionBus()
        try:
            obj = bus.get_object(
                "org.freedesktop.Notifications",
                "/org/freedesktop/Notifications"
            )
            interface = dbus.Interface(obj, "org.freedesktop.Notifications")
            notification_id = interface.Notify(
                self.app_name,
                dbus.UInt32(replace_id),
                "",
                summary,
                body,
                dbus.Array([], signature='s'),
                dbus.Dictionary({}, signature='sv'),
                dbus.Int32(-1)
            )
        finally:
            bus.close()

        self.logger.debug(f"Notification sent: {summary} (id {notification_id})")
        return int(notification_id)

    def _send_winotify(self, summary: str, body: str) -> None:
        toast = WinNotification(
            app_id=self.app_name,
            title=summary,
            msg=body,
            duration="short"
        )
        toast.show()
        self.logger.debug(f"Notification sent: {summary}")

    def _send_plyer(self, summary: str, body: str, duration: int = 5) -> None:
        plyer_notification.notify(
            title=summary,
            message=body,
            app_name=self.app_name,
            timeout=duration
        )
        self.logger.debug(f"Notification sent: {summary}")


def notify_safely(
    notifier: Optional[NotifierProtocol],
    logger: logging.Logger,
    replace_id: int,
    summary: str,
    body: str
) -> int:
    """Send a notification, logging failures instead of raising.

    Returns:
        The new notification id, or ``replace_id`` if sending failed
    """
    if notifier is None:
        return replace_id

    try:
        return notifier.notify(replace_id, summary, body)
    except Exception as e:
        logger.error(f"Failed to send notification: {e}")
        return replace_id
