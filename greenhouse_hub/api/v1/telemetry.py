"""
Telemetry API endpoints.

Read-through access to the latest and historical samples of a
greenhouse controller.
"""
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..dependencies import get_device_target, get_hub
from ..schemas import TelemetryResponse
from ...domain.entities.session import DeviceTarget
from ...hub import GreenhouseHub

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/devices", tags=["Telemetry"])


def _split_keys(keys: Optional[str]) -> List[str]:
    return [k.strip() for k in (keys or "").split(",") if k.strip()]


@router.get(
    "/{device_id}/telemetry/latest",
    response_model=TelemetryResponse,
    summary="Get latest telemetry",
    description="Latest sample of each requested key.",
)
async def get_latest_telemetry(
    device_id: UUID,
    keys: str = Query(..., description="Comma-separated telemetry keys"),
    target: DeviceTarget = Depends(get_device_target),
    hub: GreenhouseHub = Depends(get_hub),
) -> TelemetryResponse:
    key_list = _split_keys(keys)
    if not key_list:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one telemetry key is required",
        )

    data = await hub.client.get_latest_telemetry(target, key_list)
    return TelemetryResponse(device_id=str(device_id), data=data or {})


@router.get(
    "/{device_id}/telemetry/timeseries",
    response_model=TelemetryResponse,
    summary="Get telemetry history",
    description="Samples between two epoch-millisecond timestamps, optionally aggregated.",
)
async def get_telemetry_timeseries(
    device_id: UUID,
    keys: str = Query(..., description="Comma-separated telemetry keys"),
    start_ts: int = Query(..., ge=0, description="Start (epoch ms)"),
    end_ts: int = Query(..., ge=0, description="End (epoch ms)"),
    interval: Optional[int] = Query(default=None, gt=0, description="Aggregation interval (ms)"),
    agg: Optional[str] = Query(default=None, pattern="^(MIN|MAX|AVG|SUM|COUNT|NONE)$"),
    limit: Optional[int] = Query(default=None, gt=0, le=50000),
    target: DeviceTarget = Depends(get_device_target),
    hub: GreenhouseHub = Depends(get_hub),
) -> TelemetryResponse:
    key_list = _split_keys(keys)
    if not key_list:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one telemetry key is required",
        )
    if end_ts < start_ts:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_ts must not be before start_ts",
        )

    data = await hub.client.get_telemetry_timeseries(
        target,
        key_list,
        start_ts=start_ts,
        end_ts=end_ts,
        interval=interval,
        agg=agg,
        limit=limit,
    )
    return TelemetryResponse(device_id=str(device_id), data=data or {})
