"""
Pydantic schemas for command API endpoints.
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class CommandRequest(BaseModel):
    """Request to send a command to a greenhouse controller."""
    method: str = Field(..., min_length=1, max_length=100, examples=["set_fan_1_cmd"])
    params: Any = None
    expected_value: Any = None
    wait: bool = Field(default=False, description="Wait for confirmation before answering")
    wait_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        le=60,
        description="Seconds to wait when ``wait`` is set; defaults to the command deadline",
    )


class CommandAcceptedResponse(BaseModel):
    """Response for an accepted command."""
    accepted: bool
    method: str
    state: str
    error: Optional[str] = None
    message: Optional[str] = None


class CommandStatusResponse(BaseModel):
    """Pending flag and last outcome of one control."""
    method: str
    pending: bool
    state: Optional[str] = None
    last_outcome: Optional[str] = None
    last_error: Optional[str] = None


class PendingCommandsResponse(BaseModel):
    """Controls of a device that are waiting for confirmation."""
    device_id: str
    pending: List[str]


class RpcRequest(BaseModel):
    """Raw RPC passthrough, no confirmation tracking."""
    method: str = Field(..., min_length=1, max_length=100)
    params: Any = None
    timeout_ms: int = Field(default=5000, ge=0, le=60000)
    force_one_way: bool = False


class RpcResponse(BaseModel):
    """Result of a raw RPC."""
    method: str
    one_way: bool
    response: Any = None


class ControlLogResponse(BaseModel):
    """One resolved command of a greenhouse."""
    id: str
    method: str
    control_key: str
    params: Any = None
    outcome: str
    success: bool
    error_message: Optional[str] = None
    created_at: datetime


class ControlHistoryResponse(BaseModel):
    """Control log of a greenhouse, newest first."""
    device_id: str
    entries: List[ControlLogResponse]
