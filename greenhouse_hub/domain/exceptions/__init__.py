# Domain Exceptions
from .domain_exceptions import (
    DomainException,
    PlatformError,
    PlatformAuthError,
    PlatformConnectionError,
    PlatformTimeoutError,
    TenantNotFoundError,
    DeviceNotFoundError,
    DeviceUnreachableError,
    ConfirmationTimeout,
    RuleEvaluationError,
)

__all__ = [
    'DomainException',
    'PlatformError',
    'PlatformAuthError',
    'PlatformConnectionError',
    'PlatformTimeoutError',
    'TenantNotFoundError',
    'DeviceNotFoundError',
    'DeviceUnreachableError',
    'ConfirmationTimeout',
    'RuleEvaluationError',
]
