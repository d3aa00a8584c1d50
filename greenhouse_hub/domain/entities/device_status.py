"""
Device reachability entities.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from .session import DeviceTarget


class GreenhouseStatus(str, Enum):
    """Lifecycle status of a registered greenhouse (set by admins)."""
    READY = "ready"
    DEVELOPING = "developing"


class ConnectionState(str, Enum):
    """Reachability as last observed through the platform."""
    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"

    @classmethod
    def from_bool(cls, is_online: bool) -> "ConnectionState":
        return cls.ONLINE if is_online else cls.OFFLINE


@dataclass
class MonitoredDevice:
    """A registered greenhouse controller with a remote identifier."""
    id: UUID
    target: DeviceTarget
    name: str
    status: GreenhouseStatus = GreenhouseStatus.READY


@dataclass(frozen=True)
class DeviceStatusSnapshot:
    """Last observed reachability of a device."""
    device_id: UUID
    is_online: bool
    last_checked: datetime
    offline_since: Optional[datetime] = None

    @property
    def connection_state(self) -> ConnectionState:
        return ConnectionState.from_bool(self.is_online)

    def touched(self, now: datetime) -> "DeviceStatusSnapshot":
        """Same status, newer check time."""
        return replace(self, last_checked=now)

    def transitioned(self, is_online: bool, now: datetime) -> "DeviceStatusSnapshot":
        """Snapshot after a status change observed at ``now``."""
        return DeviceStatusSnapshot(
            device_id=self.device_id,
            is_online=is_online,
            last_checked=now,
            offline_since=None if is_online else (self.offline_since or now),
        )

    def offline_duration(self, now: datetime) -> Optional[float]:
        """Seconds spent offline, if the device was offline with a known start."""
        if self.is_online or self.offline_since is None:
            return None
        return (now - self.offline_since).total_seconds()
