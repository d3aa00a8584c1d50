# Pydantic Schemas for the hub API

from .command_schemas import (
    CommandRequest,
    CommandAcceptedResponse,
    CommandStatusResponse,
    PendingCommandsResponse,
    ControlLogResponse,
    ControlHistoryResponse,
    RpcRequest,
    RpcResponse,
)
from .device_schemas import (
    DeviceStatusResponse,
    AttributesResponse,
    ConnectionTestResponse,
)
from .telemetry_schemas import (
    TelemetrySample,
    TelemetryResponse,
)

__all__ = [
    'CommandRequest',
    'CommandAcceptedResponse',
    'CommandStatusResponse',
    'PendingCommandsResponse',
    'ControlLogResponse',
    'ControlHistoryResponse',
    'RpcRequest',
    'RpcResponse',
    'DeviceStatusResponse',
    'AttributesResponse',
    'ConnectionTestResponse',
    'TelemetrySample',
    'TelemetryResponse',
]
