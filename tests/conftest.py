"""
Shared pytest fixtures for Greenhouse Hub tests.

Provides fixtures for:
- Settings with short timings
- ThingsBoard simulator and platform client
- Unit of work mocks
- Notification sink
"""
import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Test environment configuration
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("MONITOR_DEVICE_ENABLED", "false")
os.environ.setdefault("MONITOR_SENSOR_ENABLED", "false")

from greenhouse_hub.config import (  # noqa: E402
    CommandSettings,
    MonitorSettings,
    PlatformSettings,
)
from greenhouse_hub.domain.entities.session import DeviceTarget, TenantCredentials  # noqa: E402
from greenhouse_hub.infrastructure.notifications.logging_sink import LoggingNotificationSink  # noqa: E402
from greenhouse_hub.infrastructure.platform.tenant_registry import StaticTenantRegistry  # noqa: E402
from greenhouse_hub.infrastructure.platform.thingsboard_client import ThingsBoardClient  # noqa: E402

from tests.simulators import ThingsBoardSimulator  # noqa: E402

TENANT = "greenhouse-a"
BASE_URL = "http://tb.test"
NOW_EPOCH = 1_700_000_000.0


class ManualClock:
    """Wall clock in epoch seconds that only moves when told to."""

    def __init__(self, now: float = NOW_EPOCH):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# Settings Fixtures
# ============================================================================

@pytest.fixture
def platform_settings():
    """Platform settings with a short request deadline."""
    return PlatformSettings(
        request_timeout=1.0,
        token_lifetime=9000.0,
        token_expiry_buffer=60.0,
        online_threshold_seconds=180,
        telemetry_fresh_seconds=120,
    )


@pytest.fixture
def command_settings():
    """Command timings scaled down to milliseconds."""
    return CommandSettings(
        check_offsets=[0.02, 0.06],
        simple_ttl=0.2,
        compound_ttl=0.3,
        settle_delay=0.02,
        check_online=False,
    )


@pytest.fixture
def monitor_settings():
    return MonitorSettings(
        device_enabled=False,
        sensor_enabled=False,
        device_interval=1,
        sensor_interval=1,
        stale_after_seconds=300,
        offline_notify_every_seconds=1800,
    )


# ============================================================================
# Platform Fixtures
# ============================================================================

@pytest.fixture
def wall_clock():
    return ManualClock()


@pytest.fixture
def credentials():
    return TenantCredentials(
        tenant=TENANT,
        base_url=BASE_URL,
        username="tenant@example.com",
        password="secret",
    )


@pytest.fixture
def tenant_registry(credentials):
    return StaticTenantRegistry([credentials])


@pytest.fixture
def platform():
    """In-memory ThingsBoard tenant."""
    return ThingsBoardSimulator()


@pytest_asyncio.fixture
async def client(tenant_registry, platform_settings, platform, wall_clock):
    """Platform client talking to the simulator."""
    tb = ThingsBoardClient(
        tenant_registry,
        settings=platform_settings,
        transport=platform.transport,
        clock=wall_clock,
    )
    yield tb
    await tb.aclose()


@pytest.fixture
def device_target():
    return DeviceTarget(tenant=TENANT, device_id="dev-1", name="GH North")


# ============================================================================
# Persistence Fixtures
# ============================================================================

@pytest.fixture
def mock_uow():
    """
    Mock unit of work usable as ``async with uow_factory() as uow``.

    Repositories are AsyncMocks that can be configured per test.
    """
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    uow.close = AsyncMock()

    uow.projects = AsyncMock()
    uow.greenhouses = AsyncMock()
    uow.greenhouses.list_monitored = AsyncMock(return_value=[])
    uow.alert_rules = AsyncMock()
    uow.alert_rules.get_active_rules_for_ready_devices = AsyncMock(return_value=[])
    uow.control_logs = AsyncMock()
    uow.control_logs.list_by_greenhouse = AsyncMock(return_value=[])
    return uow


@pytest.fixture
def uow_factory(mock_uow):
    return MagicMock(return_value=mock_uow)


@pytest.fixture
def mock_session():
    """Create a mock database session."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


# ============================================================================
# Notification Fixtures
# ============================================================================

@pytest.fixture
def sink():
    """Logging sink that also keeps emitted events."""
    return LoggingNotificationSink(history=100)
