"""
Platform session entities.

Tenant credentials, device addressing and the session token issued
by the platform login endpoint.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TenantCredentials:
    """Login details for one tenant (project) on the platform."""
    tenant: str
    base_url: str
    username: str
    password: str

    @property
    def api_root(self) -> str:
        return self.base_url.rstrip("/")


@dataclass(frozen=True)
class DeviceTarget:
    """A remote device and the tenant whose credentials reach it."""
    tenant: str
    device_id: str
    name: Optional[str] = None

    def __str__(self) -> str:
        return self.name or self.device_id


@dataclass(frozen=True)
class SessionToken:
    """
    A platform session token.

    Immutable: a refresh always produces a new instance that replaces
    the cached one as a whole.
    """
    token: str
    refresh_token: Optional[str]
    expires_at: float  # epoch seconds

    def is_valid(self, now: float, buffer: float) -> bool:
        """Check the token is usable for at least ``buffer`` more seconds."""
        return self.expires_at > now + buffer
