"""
Tenant API endpoints.
"""
import logging

from fastapi import APIRouter, Depends

from ..dependencies import get_hub
from ..schemas import ConnectionTestResponse
from ...hub import GreenhouseHub

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.post(
    "/{tenant}/test-connection",
    response_model=ConnectionTestResponse,
    summary="Test platform credentials",
    description="Log in to ThingsBoard with the tenant's credentials.",
)
async def test_connection(
    tenant: str,
    hub: GreenhouseHub = Depends(get_hub),
) -> ConnectionTestResponse:
    success, message = await hub.client.test_connection(tenant)
    if not success:
        logger.warning(f"Connection test for tenant {tenant} failed: {message}")
    return ConnectionTestResponse(tenant=tenant, success=success, message=message)
