"""Local turn notifications for the client synchronizer.

Notifications are best-effort: an unsupported platform, a denied permission
or a notifier that raises all mean "no notification", never an error.
"""
import logging
from enum import Enum
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class NotificationPermission(str, Enum):
    """Permission states a notifier can report."""
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class Notifier(Protocol):
    """Platform notification capability."""

    def is_supported(self) -> bool:
        ...

    def permission(self) -> str:
        ...

    async def request_permission(self) -> str:
        ...

    def notify(self, title: str, body: str) -> None:
        ...


class NullNotifier:
    """Notifier for platforms without notification support."""

    def is_supported(self) -> bool:
        return False

    def permission(self) -> str:
        return NotificationPermission.DENIED.value

    async def request_permission(self) -> str:
        return NotificationPermission.DENIED.value

    def notify(self, title: str, body: str) -> None:
        pass


class LoggingNotifier:
    """Notifier that writes notifications to the log. Always granted."""

    def __init__(self, logger_name: str = "gamestore.notifications"):
        self._logger = logging.getLogger(logger_name)

    def is_supported(self) -> bool:
        return True

    def permission(self) -> str:
        return NotificationPermission.GRANTED.value

    async def request_permission(self) -> str:
        return NotificationPermission.GRANTED.value

    def notify(self, title: str, body: str) -> None:
        self._logger.info(f"{title}: {body}")


async def request_permission_safely(notifier: Notifier) -> Optional[str]:
    """Ask for notification permission. Returns None when unsupported or on error."""
    try:
        if not notifier.is_supported():
            logger.debug("Notifications are not supported on this platform")
            return None
        return await notifier.request_permission()
    except Exception as e:
        logger.debug(f"Notification permission request failed: {e}")
        return None


def notify_safely(notifier: Notifier, title: str, body: str) -> bool:
    """Show a notification if supported and granted. Returns True if shown."""
    try:
        if not notifier.is_supported():
            return False
        if notifier.permission() != NotificationPermission.GRANTED.value:
            return False
        notifier.notify(title, body)
        return True
    except Exception as e:
        logger.debug(f"Notification failed: {e}")
        return False
