"""
Alert rule entities.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

from .base import Entity
from .session import DeviceTarget


class AlertSeverity(str, Enum):
    """Alert severity levels."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class ConditionType(str, Enum):
    """Threshold condition types."""
    ABOVE = "above"
    BELOW = "below"
    EQUAL = "equal"
    BETWEEN = "between"
    OUTSIDE = "outside"

    @property
    def is_range(self) -> bool:
        return self in (ConditionType.BETWEEN, ConditionType.OUTSIDE)


@dataclass(kw_only=True)
class AlertRule(Entity):
    """
    Threshold rule on one sensor key of one greenhouse.

    Rules are managed by admins; the sensor monitor only writes back
    ``last_triggered_at``, which re-arms the cooldown.
    """
    device_id: UUID  # greenhouse id
    name: str
    sensor_key: str
    condition_type: ConditionType
    threshold_value: Optional[float] = None
    threshold_min: Optional[float] = None
    threshold_max: Optional[float] = None
    severity: AlertSeverity = AlertSeverity.WARNING
    cooldown_seconds: int = 1800
    is_active: bool = True
    last_triggered_at: Optional[datetime] = None

    # Resolved from the greenhouse and its project when loaded for monitoring
    target: Optional[DeviceTarget] = None
    device_name: Optional[str] = None

    def in_cooldown(self, now: datetime) -> bool:
        """Check if the rule fired less than ``cooldown_seconds`` ago."""
        if self.last_triggered_at is None:
            return False
        last = self.last_triggered_at
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        return now - last < timedelta(seconds=self.cooldown_seconds)

    def can_trigger(self, now: datetime) -> bool:
        """Check if rule can trigger (respecting cooldown)."""
        return self.is_active and not self.in_cooldown(now)

    def record_trigger(self, now: datetime) -> None:
        """Record that the rule was triggered."""
        self.last_triggered_at = now
        self.mark_updated()
