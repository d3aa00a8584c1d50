# Platform - ThingsBoard HTTP client and session handling

from .thingsboard_client import ThingsBoardClient
from .token_cache import TokenCache
from .tenant_registry import DatabaseTenantRegistry, StaticTenantRegistry

__all__ = [
    'ThingsBoardClient',
    'TokenCache',
    'DatabaseTenantRegistry',
    'StaticTenantRegistry',
]
