"""
Device API endpoints: attributes, reachability and raw RPC.
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_device_target, get_hub
from ..schemas import AttributesResponse, DeviceStatusResponse, RpcRequest, RpcResponse
from ...domain.entities.device_status import ConnectionState
from ...domain.entities.session import DeviceTarget
from ...domain.services.command_catalog import CommandCatalog
from ...hub import GreenhouseHub

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/devices", tags=["Devices"])


@router.get(
    "/{device_id}/attributes",
    response_model=AttributesResponse,
    summary="Get device attributes",
)
async def get_attributes(
    device_id: UUID,
    keys: Optional[str] = Query(default=None, description="Comma-separated keys; all when omitted"),
    target: DeviceTarget = Depends(get_device_target),
    hub: GreenhouseHub = Depends(get_hub),
) -> AttributesResponse:
    key_list = [k.strip() for k in (keys or "").split(",") if k.strip()]
    attributes = await hub.client.get_attributes(target, key_list or None)
    return AttributesResponse(device_id=str(device_id), attributes=attributes)


@router.get(
    "/{device_id}/status",
    response_model=DeviceStatusResponse,
    summary="Get device reachability",
    description="Live reachability check plus the monitor's last snapshot.",
)
async def get_status(
    device_id: UUID,
    target: DeviceTarget = Depends(get_device_target),
    hub: GreenhouseHub = Depends(get_hub),
) -> DeviceStatusResponse:
    is_online = await hub.client.is_online(target)
    snapshot = hub.device_monitor.get_status(device_id)

    return DeviceStatusResponse(
        device_id=str(device_id),
        name=target.name,
        is_online=is_online,
        status=ConnectionState.from_bool(is_online).value,
        last_checked=snapshot.last_checked.isoformat() if snapshot else None,
        offline_since=(
            snapshot.offline_since.isoformat()
            if snapshot and snapshot.offline_since else None
        ),
    )


@router.post(
    "/{device_id}/rpc",
    response_model=RpcResponse,
    summary="Send a raw RPC",
    description=(
        "Passthrough without confirmation tracking. Control methods are always "
        "sent one-way; other methods wait for the device reply."
    ),
)
async def send_rpc(
    request: RpcRequest,
    target: DeviceTarget = Depends(get_device_target),
    hub: GreenhouseHub = Depends(get_hub),
) -> RpcResponse:
    await hub.client.ensure_online(target)

    one_way = request.force_one_way or request.timeout_ms == 0 or CommandCatalog.is_one_way(request.method)
    response = await hub.client.send_rpc(
        target,
        request.method,
        request.params,
        timeout=None if one_way else request.timeout_ms,
    )
    return RpcResponse(method=request.method, one_way=one_way, response=response)
