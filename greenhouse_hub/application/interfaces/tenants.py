"""
Tenant registry interface.
"""
from abc import ABC, abstractmethod
from typing import List

from ...domain.entities.session import TenantCredentials


class TenantRegistry(ABC):
    """Supplies platform credentials per tenant."""

    @abstractmethod
    async def get_credentials(self, tenant: str) -> TenantCredentials:
        """
        Get credentials for a tenant.

        Raises:
            TenantNotFoundError: If the tenant is not registered
        """
        pass

    @abstractmethod
    async def list_tenants(self) -> List[str]:
        pass
