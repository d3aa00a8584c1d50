"""
Tenant registry implementations.
"""
import logging
from typing import Dict, Iterable, List, Optional

from ...application.interfaces.tenants import TenantRegistry
from ...application.interfaces.unit_of_work import UnitOfWorkFactory
from ...config import PlatformSettings
from ...domain.entities.session import TenantCredentials
from ...domain.exceptions import TenantNotFoundError

logger = logging.getLogger(__name__)


class StaticTenantRegistry(TenantRegistry):
    """In-memory registry, typically a single tenant from the environment."""

    def __init__(self, credentials: Iterable[TenantCredentials] = ()):
        self._credentials: Dict[str, TenantCredentials] = {c.tenant: c for c in credentials}

    @classmethod
    def from_settings(cls, settings: PlatformSettings) -> "StaticTenantRegistry":
        if not (settings.base_url and settings.username and settings.password):
            return cls()
        return cls([
            TenantCredentials(
                tenant=settings.tenant,
                base_url=settings.base_url,
                username=settings.username,
                password=settings.password,
            )
        ])

    def register(self, credentials: TenantCredentials) -> None:
        self._credentials[credentials.tenant] = credentials

    async def get_credentials(self, tenant: str) -> TenantCredentials:
        credentials = self._credentials.get(tenant)
        if credentials is None:
            raise TenantNotFoundError(tenant)
        return credentials

    async def list_tenants(self) -> List[str]:
        return list(self._credentials)


class DatabaseTenantRegistry(TenantRegistry):
    """
    Reads credentials from the projects table.

    Falls back to ``fallback`` (e.g. env-configured credentials) for
    tenants with no project row.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        fallback: Optional[TenantRegistry] = None,
    ):
        self._uow_factory = uow_factory
        self._fallback = fallback

    async def get_credentials(self, tenant: str) -> TenantCredentials:
        async with self._uow_factory() as uow:
            credentials = await uow.projects.get_credentials(tenant)

        if credentials is not None:
            return credentials
        if self._fallback is not None:
            return await self._fallback.get_credentials(tenant)
        raise TenantNotFoundError(tenant)

    async def list_tenants(self) -> List[str]:
        async with self._uow_factory() as uow:
            tenants = [c.tenant for c in await uow.projects.list_credentials()]

        if self._fallback is not None:
            for tenant in await self._fallback.list_tenants():
                if tenant not in tenants:
                    tenants.append(tenant)
        return tenants
