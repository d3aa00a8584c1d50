"""
Domain Exceptions - Custom exceptions for domain-specific errors.
"""
from typing import Any, Dict, Optional


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    All domain exceptions should inherit from this class to allow
    for consistent error handling across the application.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            'error': self.code,
            'message': self.message,
            'details': self.details
        }


class PlatformError(DomainException):
    """Base error for failures talking to the remote device platform."""


class PlatformAuthError(PlatformError):
    """Raised on bad credentials or a 401/403 that survives one token refresh."""

    def __init__(self, message: str = "Platform authentication failed", tenant: Optional[str] = None):
        self.tenant = tenant
        super().__init__(
            message=message,
            code='PLATFORM_AUTH_ERROR',
            details={'tenant': tenant} if tenant else {}
        )


class PlatformConnectionError(PlatformError):
    """Raised when the platform is unreachable or answers with a non-2xx status."""

    def __init__(
        self,
        message: str = "Cannot connect to platform",
        status_code: Optional[int] = None,
        body: Optional[str] = None
    ):
        self.status_code = status_code
        self.body = body
        details: Dict[str, Any] = {}
        if status_code is not None:
            details['status_code'] = status_code
        super().__init__(
            message=message,
            code='PLATFORM_CONNECTION_ERROR',
            details=details
        )


class PlatformTimeoutError(PlatformError):
    """Raised when a platform request exceeds its deadline."""

    def __init__(self, message: str = "Platform did not respond in time", timeout: Optional[float] = None):
        self.timeout = timeout
        super().__init__(
            message=message,
            code='PLATFORM_TIMEOUT',
            details={'timeout': timeout} if timeout is not None else {}
        )


class TenantNotFoundError(DomainException):
    """Raised when no credentials are registered for a tenant."""

    def __init__(self, tenant: str):
        self.tenant = tenant
        super().__init__(
            message=f"Tenant '{tenant}' not found",
            code='TENANT_NOT_FOUND',
            details={'tenant': tenant}
        )


class DeviceNotFoundError(DomainException):
    """Raised when a device has no remote identifier or is not registered."""

    def __init__(self, device_id: Any):
        self.device_id = device_id
        super().__init__(
            message=f"Device '{device_id}' not found",
            code='DEVICE_NOT_FOUND',
            details={'device_id': str(device_id)}
        )


class DeviceUnreachableError(DomainException):
    """Raised when a reachability check reports the device offline."""

    def __init__(self, device_id: str, name: Optional[str] = None):
        self.device_id = device_id
        super().__init__(
            message=f"Device {name or device_id} is offline",
            code='DEVICE_UNREACHABLE',
            details={'device_id': device_id}
        )


class ConfirmationTimeout(DomainException):
    """
    Describes a command the platform accepted but whose expected state
    was never observed before its deadline.

    The actuator may still have changed state, so this is an
    "unconfirmed" outcome, not a failure.
    """

    def __init__(self, method: str, deadline: Optional[float] = None):
        self.method = method
        super().__init__(
            message=f"Command {method} was sent but not confirmed",
            code='CONFIRMATION_TIMEOUT',
            details={'method': method, 'deadline': deadline}
        )


class RuleEvaluationError(DomainException):
    """Raised when a single alert rule cannot be evaluated."""

    def __init__(self, rule_id: Any, reason: str):
        self.rule_id = rule_id
        super().__init__(
            message=f"Alert rule {rule_id} could not be evaluated: {reason}",
            code='RULE_EVALUATION_ERROR',
            details={'rule_id': str(rule_id), 'reason': reason}
        )
