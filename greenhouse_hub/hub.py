"""
Greenhouse Hub runtime.

Wires the platform client, the background monitors and the per-device
command dispatchers together and owns their lifecycle.
"""
import logging
from typing import Dict, List, Optional, Tuple
from uuid import UUID

import httpx

from .application.interfaces.notifications import NotificationSink
from .application.interfaces.tenants import TenantRegistry
from .application.interfaces.unit_of_work import UnitOfWorkFactory
from .application.services.command_dispatcher import CommandDispatcher
from .application.services.control_log import ControlLogRecorder
from .application.services.device_monitor import DeviceMonitor
from .application.services.sensor_monitor import SensorMonitor
from .config import Settings, get_settings
from .domain.entities.control_log import ControlLogEntry
from .domain.entities.session import DeviceTarget
from .domain.exceptions import DeviceNotFoundError
from .domain.services.command_catalog import CommandCatalog
from .infrastructure.notifications.logging_sink import LoggingNotificationSink
from .infrastructure.platform.tenant_registry import DatabaseTenantRegistry, StaticTenantRegistry
from .infrastructure.platform.thingsboard_client import ThingsBoardClient

logger = logging.getLogger(__name__)


class GreenhouseHub:
    """
    Main runtime orchestrator.

    One platform client is shared by both monitors and every dispatcher,
    so all of them share one token cache per tenant.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        settings: Optional[Settings] = None,
        tenants: Optional[TenantRegistry] = None,
        sink: Optional[NotificationSink] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the hub.

        Args:
            uow_factory: Opens a unit of work per sweep or lookup.
            settings: Application settings.
            tenants: Credential source; defaults to the projects table with
                env-configured credentials as fallback.
            sink: Receiver of monitor events; defaults to the log.
            transport: Optional httpx transport for the platform client.
        """
        self.settings = settings or get_settings()
        self._uow_factory = uow_factory

        self.tenants = tenants or DatabaseTenantRegistry(
            uow_factory,
            fallback=StaticTenantRegistry.from_settings(self.settings.platform),
        )
        self.sink = sink or LoggingNotificationSink()
        self.catalog = CommandCatalog()

        self.client = ThingsBoardClient(
            self.tenants,
            settings=self.settings.platform,
            transport=transport,
        )
        self.device_monitor = DeviceMonitor(
            self.client,
            uow_factory,
            self.sink,
            settings=self.settings.monitors,
        )
        self.sensor_monitor = SensorMonitor(
            self.client,
            uow_factory,
            self.sink,
            settings=self.settings.monitors,
        )

        self._dispatchers: Dict[Tuple[str, str], CommandDispatcher] = {}
        self._recorders: Dict[Tuple[str, str], ControlLogRecorder] = {}
        self._running = False

    async def start(self) -> None:
        """Start the enabled background monitors."""
        logger.info("Starting Greenhouse Hub...")
        monitors = self.settings.monitors

        if monitors.device_enabled:
            await self.device_monitor.start(monitors.device_interval)
        if monitors.sensor_enabled:
            await self.sensor_monitor.start(monitors.sensor_interval)

        self._running = True
        logger.info("Greenhouse Hub started")

    async def stop(self) -> None:
        """Stop monitors, drop in-flight commands and close the client."""
        if not self._running:
            return

        logger.info("Stopping Greenhouse Hub...")
        self._running = False

        await self.device_monitor.stop()
        await self.sensor_monitor.stop()

        dispatchers = list(self._dispatchers.values())
        self._dispatchers.clear()
        self._recorders.clear()
        for dispatcher in dispatchers:
            await dispatcher.shutdown()

        await self.client.aclose()
        logger.info("Greenhouse Hub stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    def dispatcher_for(
        self,
        target: DeviceTarget,
        greenhouse_id: Optional[UUID] = None,
    ) -> CommandDispatcher:
        """
        Get the dispatcher for a device, creating it on first use.

        With ``greenhouse_id``, every resolved command of the device is
        written to that greenhouse's control log.

        Raises:
            RuntimeError: If the hub is not running.
        """
        if not self._running:
            raise RuntimeError("Greenhouse Hub is not running")

        key = (target.tenant, target.device_id)
        dispatcher = self._dispatchers.get(key)
        if dispatcher is None:
            dispatcher = CommandDispatcher(
                self.client,
                target,
                catalog=self.catalog,
                settings=self.settings.commands,
            )
            self._dispatchers[key] = dispatcher

        if greenhouse_id is not None and key not in self._recorders:
            recorder = ControlLogRecorder(self._uow_factory, greenhouse_id, dispatcher)
            recorder.attach()
            self._recorders[key] = recorder
        return dispatcher

    async def control_history(self, device_id: UUID, limit: int = 50) -> List[ControlLogEntry]:
        """Latest control log entries of a greenhouse, newest first."""
        async with self._uow_factory() as uow:
            return await uow.control_logs.list_by_greenhouse(device_id, limit=limit)

    async def resolve_target(self, device_id: UUID) -> DeviceTarget:
        """
        Look up the platform target of a registered greenhouse.

        Raises:
            DeviceNotFoundError: If the greenhouse is unknown or not linked
                to a platform device.
        """
        async with self._uow_factory() as uow:
            device = await uow.greenhouses.get_by_id(device_id)

        if device is None:
            raise DeviceNotFoundError(device_id)
        return device.target
