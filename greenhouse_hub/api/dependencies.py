"""
FastAPI dependencies for the hub API.

The running ``GreenhouseHub`` lives on ``app.state``; routes reach the
platform client and dispatchers through it.
"""
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status

from ..domain.entities.session import DeviceTarget
from ..hub import GreenhouseHub


def get_hub(request: Request) -> GreenhouseHub:
    """Get the running hub."""
    hub = getattr(request.app.state, "hub", None)
    if hub is None or not hub.is_running:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Hub is not running",
        )
    return hub


async def get_device_target(
    device_id: UUID,
    hub: GreenhouseHub = Depends(get_hub),
) -> DeviceTarget:
    """
    Resolve a greenhouse id to its platform target.

    Raises:
        DeviceNotFoundError: Answered with 404 by the app's handler.
    """
    return await hub.resolve_target(device_id)
