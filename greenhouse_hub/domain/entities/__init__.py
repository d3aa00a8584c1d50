"""
Domain entities for the Greenhouse Hub.
"""
from .base import Entity, utc_now
from .session import (
    TenantCredentials,
    DeviceTarget,
    SessionToken,
)
from .command import (
    ActuatorClass,
    CommandState,
    MotorCommand,
    CommandDescriptor,
    PendingCommand,
)
from .device_status import (
    GreenhouseStatus,
    ConnectionState,
    MonitoredDevice,
    DeviceStatusSnapshot,
)
from .alert_rule import (
    AlertSeverity,
    ConditionType,
    AlertRule,
)
from .notification import (
    NotificationType,
    NotificationEvent,
)
from .control_log import ControlLogEntry
from .telemetry import SensorReading

__all__ = [
    # Base
    "Entity",
    "utc_now",
    # Session
    "TenantCredentials",
    "DeviceTarget",
    "SessionToken",
    # Command
    "ActuatorClass",
    "CommandState",
    "MotorCommand",
    "CommandDescriptor",
    "PendingCommand",
    # Device status
    "GreenhouseStatus",
    "ConnectionState",
    "MonitoredDevice",
    "DeviceStatusSnapshot",
    # Alert rule
    "AlertSeverity",
    "ConditionType",
    "AlertRule",
    # Notification
    "NotificationType",
    "NotificationEvent",
    # Telemetry
    "SensorReading",
    # Control log
    "ControlLogEntry",
]
