"""
Notification events emitted by the background monitors.

Storage and delivery belong to the notification sink; the core only
builds the event.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from .alert_rule import AlertSeverity
from .base import utc_now


class NotificationType(str, Enum):
    """Notification event types."""
    DEVICE_OFFLINE = "device_offline"
    DEVICE_ONLINE = "device_online"
    SENSOR_ALERT = "sensor_alert"
    SENSOR_OFFLINE = "sensor_offline"


@dataclass
class NotificationEvent:
    """A structured event handed to the notification sink."""
    type: NotificationType
    severity: AlertSeverity
    title: str
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    device_id: Optional[UUID] = None
    tenant: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'severity': self.severity.value,
            'title': self.title,
            'message': self.message,
            'metadata': self.metadata,
            'device_id': str(self.device_id) if self.device_id else None,
            'tenant': self.tenant,
            'created_at': self.created_at.isoformat(),
        }
