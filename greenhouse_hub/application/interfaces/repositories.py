"""
Repository interfaces (ports) for domain entities.

These interfaces define the contract for persistence operations
without specifying the implementation details.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from ...domain.entities.alert_rule import AlertRule
from ...domain.entities.control_log import ControlLogEntry
from ...domain.entities.device_status import GreenhouseStatus, MonitoredDevice
from ...domain.entities.session import TenantCredentials


class ProjectRepository(ABC):
    """Repository for projects, which carry the platform tenant credentials."""

    @abstractmethod
    async def get_credentials(self, tenant: str) -> Optional[TenantCredentials]:
        """Get platform credentials by project key."""
        pass

    @abstractmethod
    async def list_credentials(self) -> List[TenantCredentials]:
        pass


class GreenhouseRepository(ABC):
    """Repository for greenhouses, the monitored controller devices."""

    @abstractmethod
    async def get_by_id(self, id: UUID) -> Optional[MonitoredDevice]:
        """
        Get a greenhouse with a remote device id.

        Returns:
            The device, or None if unknown or not linked to the platform
        """
        pass

    @abstractmethod
    async def list_monitored(
        self,
        statuses: Sequence[GreenhouseStatus] = (GreenhouseStatus.READY, GreenhouseStatus.DEVELOPING),
    ) -> List[MonitoredDevice]:
        """List greenhouses with a remote device id and one of ``statuses``."""
        pass

    @abstractmethod
    async def update_connection_status(
        self,
        id: UUID,
        is_online: bool,
        checked_at: datetime,
    ) -> None:
        """
        Persist reachability.

        ``last_online_at`` is only advanced when ``is_online`` is true.
        """
        pass


class AlertRuleRepository(ABC):
    """Repository for alert rules, read by the sensor monitor."""

    @abstractmethod
    async def get_active_rules_for_ready_devices(self) -> List[AlertRule]:
        """
        Active rules whose greenhouse is ``ready`` and linked to the platform.

        Returned rules carry their resolved ``target``.
        """
        pass

    @abstractmethod
    async def mark_triggered(self, id: UUID, triggered_at: datetime) -> None:
        """Write back ``last_triggered_at`` only."""
        pass


class ControlLogRepository(ABC):
    """Repository for the per-greenhouse control log."""

    @abstractmethod
    async def add(self, entry: ControlLogEntry) -> ControlLogEntry:
        pass

    @abstractmethod
    async def list_by_greenhouse(self, greenhouse_id: UUID, limit: int = 50) -> List[ControlLogEntry]:
        """Most recent entries first."""
        pass
