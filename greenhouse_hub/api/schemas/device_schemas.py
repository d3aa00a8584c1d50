"""
Pydantic schemas for device and tenant endpoints.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel


class DeviceStatusResponse(BaseModel):
    """Reachability of one device as seen through the platform."""
    device_id: str
    name: str
    is_online: bool
    status: str
    last_checked: Optional[str] = None
    offline_since: Optional[str] = None


class AttributesResponse(BaseModel):
    """Device attributes flattened to key/value pairs."""
    device_id: str
    attributes: Dict[str, Any]


class ConnectionTestResponse(BaseModel):
    """Result of a tenant credential check."""
    tenant: str
    success: bool
    message: str
