"""
Notification sink interface.

Storage, fan-out and delivery of notifications live outside the core.
"""
from abc import ABC, abstractmethod

from ...domain.entities.notification import NotificationEvent


class NotificationSink(ABC):
    """Receives structured events from the background monitors."""

    @abstractmethod
    async def emit(self, event: NotificationEvent) -> None:
        """Accept one event. Implementations should not block for long."""
        pass
