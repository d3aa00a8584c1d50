"""
Notification sink that writes events to the application log.
"""
import logging
from typing import List, Optional

from ...application.interfaces.notifications import NotificationSink
from ...domain.entities.alert_rule import AlertSeverity
from ...domain.entities.notification import NotificationEvent

logger = logging.getLogger(__name__)

_LEVELS = {
    AlertSeverity.INFO: logging.INFO,
    AlertSeverity.WARNING: logging.WARNING,
    AlertSeverity.CRITICAL: logging.ERROR,
}


class LoggingNotificationSink(NotificationSink):
    """
    Logs every event at a level derived from its severity.

    Keeps the most recent events in memory when ``history`` is set, so an
    operator endpoint or a test can inspect what was emitted.
    """

    def __init__(self, history: int = 0, logger_: Optional[logging.Logger] = None):
        self._history = history
        self._events: List[NotificationEvent] = []
        self._logger = logger_ or logger

    async def emit(self, event: NotificationEvent) -> None:
        level = _LEVELS.get(event.severity, logging.INFO)
        self._logger.log(level, f"[{event.type.value}] {event.title}: {event.message}")

        if self._history > 0:
            self._events.append(event)
            del self._events[:-self._history]

    @property
    def events(self) -> List[NotificationEvent]:
        return list(self._events)
