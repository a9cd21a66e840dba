"""
User-facing notification sinks.

The engine always talks to a sink; when no tray is available it gets the
no-op sink, so the decision logic never checks for a missing UI.
"""

from ..utils.logger import get_logger

logger = get_logger(__name__)


class NotificationSink:
    """Receives lock/unlock/status events for display. All methods are optional."""

    def lock_issued(self, score: int) -> None:
        pass

    def session_locked(self, by_engine: bool) -> None:
        pass

    def session_unlocked(self) -> None:
        pass

    def status(self, message: str) -> None:
        pass

    def close(self) -> None:
        pass


class NullNotificationSink(NotificationSink):
    """Used when no tray/notification backend is available."""


def notify(sink: NotificationSink, method: str, *args) -> None:
    """Deliver one event; sink failures never reach the caller."""
    try:
        getattr(sink, method)(*args)
    except Exception as e:
        logger.debug(f"Notification sink error ({method}): {e}")
