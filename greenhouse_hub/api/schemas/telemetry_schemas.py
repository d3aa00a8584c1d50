"""
Pydantic schemas for telemetry endpoints.
"""
from typing import Any, Dict, List

from pydantic import BaseModel


class TelemetrySample(BaseModel):
    """One timestamped value (epoch milliseconds)."""
    ts: int
    value: Any = None


class TelemetryResponse(BaseModel):
    """Samples per telemetry key."""
    device_id: str
    data: Dict[str, List[TelemetrySample]]
