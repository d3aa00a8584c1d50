"""
Device reachability monitor.

Periodically checks every registered greenhouse controller and turns
online/offline transitions into notification events.
"""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Optional
from uuid import UUID

from ...application.interfaces.notifications import NotificationSink
from ...application.interfaces.unit_of_work import UnitOfWorkFactory
from ...config import MonitorSettings, get_settings
from ...domain.entities.alert_rule import AlertSeverity
from ...domain.entities.base import utc_now
from ...domain.entities.device_status import DeviceStatusSnapshot, MonitoredDevice
from ...domain.entities.notification import NotificationEvent, NotificationType
from ...domain.exceptions import PlatformError
from ...infrastructure.platform.thingsboard_client import ThingsBoardClient
from .periodic import PeriodicMonitor

logger = logging.getLogger(__name__)


class DeviceMonitor(PeriodicMonitor):
    """
    Tracks device reachability.

    The first observation of a device only records a baseline. Later
    sweeps emit an event and persist the status only when it changes.
    """

    name = "device monitor"
    default_interval = 30.0

    def __init__(
        self,
        client: ThingsBoardClient,
        uow_factory: UnitOfWorkFactory,
        sink: NotificationSink,
        settings: Optional[MonitorSettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__()
        self.client = client
        self.settings = settings or get_settings().monitors
        self._uow_factory = uow_factory
        self._sink = sink
        self._clock = clock
        self._cache: Dict[UUID, DeviceStatusSnapshot] = {}

    async def check_all(self) -> None:
        """Check every monitored device concurrently."""
        async with self._uow_factory() as uow:
            devices = await uow.greenhouses.list_monitored()

        logger.info(f"Checking {len(devices)} devices")
        await asyncio.gather(*(self.check_device(device) for device in devices))

    async def check_device(self, device: MonitoredDevice) -> None:
        """
        Check one device.

        Errors are logged and leave the cached snapshot untouched, so
        the device is simply re-checked next sweep.
        """
        try:
            is_online = await self.client.is_online(device.target)
            now = self._clock()
            cached = self._cache.get(device.id)

            if cached is None:
                logger.info(f"First check for {device.name}: {'online' if is_online else 'offline'}")
                await self._persist(device, is_online, now)
                self._cache[device.id] = DeviceStatusSnapshot(
                    device_id=device.id,
                    is_online=is_online,
                    last_checked=now,
                    offline_since=None if is_online else now,
                )
                return

            if cached.is_online == is_online:
                self._cache[device.id] = cached.touched(now)
                return

            offline_duration = cached.offline_duration(now) if is_online else None

            await self._persist(device, is_online, now)
            self._cache[device.id] = cached.transitioned(is_online, now)

            logger.info(
                f"Device status changed: {device.name} "
                f"{cached.connection_state.value} -> {'online' if is_online else 'offline'}"
            )
            await self._emit(self._transition_event(device, is_online, offline_duration))

        except PlatformError as e:
            logger.warning(f"Could not check {device.name}, keeping last status: {e.message}")
        except Exception as e:
            logger.error(f"Error checking device {device.name}: {e}")

    async def _persist(self, device: MonitoredDevice, is_online: bool, now: datetime) -> None:
        async with self._uow_factory() as uow:
            await uow.greenhouses.update_connection_status(device.id, is_online, now)
            await uow.commit()

    def _transition_event(
        self,
        device: MonitoredDevice,
        is_online: bool,
        offline_duration: Optional[float],
    ) -> NotificationEvent:
        metadata = {
            'greenhouse_id': str(device.id),
            'greenhouse_name': device.name,
            'previous_status': 'offline' if is_online else 'online',
            'new_status': 'online' if is_online else 'offline',
        }

        if is_online:
            metadata['reason'] = 'Device reconnected'
            message = f"{device.name}: device reconnected"
            if offline_duration is not None:
                metadata['offline_duration'] = int(offline_duration)
                message += f" after {int(offline_duration)}s offline"
            return NotificationEvent(
                type=NotificationType.DEVICE_ONLINE,
                severity=AlertSeverity.INFO,
                title=f"Device online: {device.name}",
                message=message,
                metadata=metadata,
                device_id=device.id,
                tenant=device.target.tenant,
            )

        metadata['reason'] = 'Connection lost'
        return NotificationEvent(
            type=NotificationType.DEVICE_OFFLINE,
            severity=AlertSeverity.CRITICAL,
            title=f"Device offline: {device.name}",
            message=f"{device.name}: Connection lost",
            metadata=metadata,
            device_id=device.id,
            tenant=device.target.tenant,
        )

    async def _emit(self, event: NotificationEvent) -> None:
        if self._stopped:
            return
        try:
            await self._sink.emit(event)
        except Exception as e:
            logger.error(f"Error emitting {event.type.value} event: {e}")

    def get_cache(self) -> Dict[UUID, DeviceStatusSnapshot]:
        """Copy of the last observed status per device."""
        return dict(self._cache)

    def get_status(self, device_id: UUID) -> Optional[DeviceStatusSnapshot]:
        return self._cache.get(device_id)
