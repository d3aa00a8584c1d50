"""
Fixtures for API tests: a running hub behind the FastAPI app.
"""
import httpx
import pytest
import pytest_asyncio

from greenhouse_hub.config import Settings
from greenhouse_hub.hub import GreenhouseHub
from greenhouse_hub.main import create_app

from tests.factories import DeviceTargetFactory, MonitoredDeviceFactory


@pytest.fixture
def greenhouse():
    return MonitoredDeviceFactory(
        name="GH North",
        target=DeviceTargetFactory(tenant="greenhouse-a", device_id="dev-1", name="GH North"),
    )


@pytest_asyncio.fixture
async def hub(uow_factory, mock_uow, tenant_registry, sink, platform, platform_settings,
              command_settings, monitor_settings, greenhouse):
    """Hub wired to the simulator with monitors disabled."""
    mock_uow.greenhouses.get_by_id.side_effect = (
        lambda device_id: greenhouse if device_id == greenhouse.id else None
    )
    settings = Settings(
        platform=platform_settings,
        commands=command_settings,
        monitors=monitor_settings,
    )
    h = GreenhouseHub(
        uow_factory,
        settings=settings,
        tenants=tenant_registry,
        sink=sink,
        transport=platform.transport,
    )
    await h.start()
    yield h
    await h.stop()


@pytest_asyncio.fixture
async def api_client(hub):
    """HTTP client for the API, bypassing the lifespan."""
    app = create_app(hub=hub)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
