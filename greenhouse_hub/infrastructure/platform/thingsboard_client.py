"""
ThingsBoard platform client.

Authenticated access to device telemetry, attributes and RPC for many
tenants (projects), each with its own platform credentials. One shared
httpx.AsyncClient pools connections across tenants.
"""
import asyncio
import logging
import time
from types import TracebackType
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type

import httpx

from ...application.interfaces.tenants import TenantRegistry
from ...config import PlatformSettings, get_settings
from ...domain.entities.session import DeviceTarget, SessionToken, TenantCredentials
from ...domain.entities.telemetry import SensorReading
from ...domain.exceptions import (
    DeviceUnreachableError,
    DomainException,
    PlatformAuthError,
    PlatformConnectionError,
    PlatformTimeoutError,
)
from .token_cache import TokenCache

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-Authorization"
AUTH_RETRY_STATUSES = (401, 403)


def _epoch_seconds(value: Any) -> Optional[float]:
    """Parse a ``last_seen`` attribute (number or numeric string)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


class ThingsBoardClient:
    """
    Client for the ThingsBoard HTTP API.

    Responsibilities:
    - Per-tenant session token lifecycle (login, cache, refresh)
    - Retry once on 401/403 with a fresh token
    - Telemetry, attribute and RPC endpoints
    - Device reachability check
    """

    def __init__(
        self,
        tenants: TenantRegistry,
        settings: Optional[PlatformSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        token_cache: Optional[TokenCache] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the client.

        Args:
            tenants: Source of per-tenant credentials.
            settings: Platform settings.
            transport: Optional httpx transport (tests use MockTransport).
            token_cache: Shared token cache.
            clock: Wall clock in epoch seconds.
        """
        self.settings = settings or get_settings().platform
        self._tenants = tenants
        self._clock = clock
        self._tokens = token_cache or TokenCache(
            expiry_buffer=self.settings.token_expiry_buffer,
            clock=clock,
        )
        # Resolved once per tenant; dropped when the platform rejects them
        self._credentials: Dict[str, TenantCredentials] = {}
        self._http = httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @property
    def tokens(self) -> TokenCache:
        return self._tokens

    # =========================================================================
    # Authentication
    # =========================================================================

    async def get_token(self, tenant: str) -> str:
        """
        Get a valid session token for a tenant, logging in if needed.

        Concurrent callers during an empty or expiring window share one
        login.

        Raises:
            TenantNotFoundError: Unknown tenant.
            PlatformAuthError: Credentials rejected.
            PlatformConnectionError: Platform unreachable or non-2xx.
            PlatformTimeoutError: Request deadline exceeded.
        """
        cached = self._tokens.get_valid(tenant)
        if cached is not None:
            return cached.token

        async with self._tokens.lock_for(tenant):
            # Another caller may have logged in while we waited
            cached = self._tokens.get_valid(tenant)
            if cached is not None:
                return cached.token

            credentials = await self._credentials_for(tenant)
            try:
                session = await self._login(credentials)
            except PlatformAuthError:
                self._credentials.pop(tenant, None)
                raise
            self._tokens.store(tenant, session)
            logger.info(f"Logged in to platform for tenant {tenant}")
            return session.token

    async def _login(self, credentials: TenantCredentials) -> SessionToken:
        issued_at = self._clock()
        response = await self._send(
            "POST",
            f"{credentials.api_root}/api/auth/login",
            json={"username": credentials.username, "password": credentials.password},
        )

        if response.status_code == 401:
            raise PlatformAuthError(tenant=credentials.tenant)
        if not response.is_success:
            raise PlatformConnectionError(
                f"Platform login failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        data = self._parse(response)
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise PlatformAuthError("Platform login returned no token", tenant=credentials.tenant)

        return SessionToken(
            token=token,
            refresh_token=data.get("refreshToken"),
            expires_at=issued_at + self.settings.token_lifetime,
        )

    async def _credentials_for(self, tenant: str) -> TenantCredentials:
        credentials = self._credentials.get(tenant)
        if credentials is None:
            credentials = await self._tenants.get_credentials(tenant)
            self._credentials[tenant] = credentials
        return credentials

    def invalidate_token(self, tenant: str) -> None:
        """Force a fresh login on the tenant's next request, re-reading its credentials."""
        self._tokens.invalidate(tenant)
        self._credentials.pop(tenant, None)

    # =========================================================================
    # Transport
    # =========================================================================

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        timeout = self.settings.request_timeout
        try:
            return await asyncio.wait_for(
                self._http.request(method, url, **kwargs),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise PlatformTimeoutError(timeout=timeout) from e
        except httpx.RequestError as e:
            raise PlatformConnectionError(f"Cannot connect to platform: {e}") from e

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        if not response.content or not response.text.strip():
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise PlatformConnectionError(
                "Platform returned a malformed response",
                status_code=response.status_code,
                body=response.text,
            ) from e

    async def request(
        self,
        tenant: str,
        endpoint: str,
        method: str = "GET",
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an authenticated request.

        A 401/403 drops the token that was used and retries exactly once
        with a fresh one.

        Returns:
            Parsed JSON body, ``{}`` for an empty body.
        """
        credentials = await self._credentials_for(tenant)
        url = f"{credentials.api_root}{endpoint}"

        for attempt in (1, 2):
            token = await self.get_token(tenant)
            response = await self._send(
                method,
                url,
                json=json,
                params=params,
                headers={AUTH_HEADER: f"Bearer {token}"},
            )

            if response.status_code in AUTH_RETRY_STATUSES:
                if attempt == 1:
                    logger.info(f"Token rejected for tenant {tenant}, refreshing")
                    self._tokens.invalidate(tenant, token)
                    continue
                raise PlatformAuthError(
                    f"Platform rejected refreshed token ({response.status_code})",
                    tenant=tenant,
                )

            if not response.is_success:
                logger.error(f"Platform error [{response.status_code}] {method} {endpoint}: {response.text}")
                raise PlatformConnectionError(
                    f"Platform request failed with status {response.status_code}",
                    status_code=response.status_code,
                    body=response.text,
                )

            return self._parse(response)

        raise PlatformAuthError(tenant=tenant)

    # =========================================================================
    # Telemetry and attributes
    # =========================================================================

    @staticmethod
    def _device_path(target: DeviceTarget) -> str:
        return f"/api/plugins/telemetry/DEVICE/{target.device_id}"

    async def get_latest_telemetry(
        self,
        target: DeviceTarget,
        keys: Sequence[str],
    ) -> Dict[str, List[Dict[str, Any]]]:
        """Latest sample per key: ``{key: [{ts, value}]}``."""
        return await self.request(
            target.tenant,
            f"{self._device_path(target)}/values/timeseries",
            params={"keys": ",".join(keys), "limit": 1},
        )

    async def get_telemetry_timeseries(
        self,
        target: DeviceTarget,
        keys: Sequence[str],
        start_ts: int,
        end_ts: int,
        interval: Optional[int] = None,
        agg: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, List[Dict[str, Any]]]:
        """Samples between ``start_ts`` and ``end_ts`` (epoch ms)."""
        params: Dict[str, Any] = {
            "keys": ",".join(keys),
            "startTs": start_ts,
            "endTs": end_ts,
        }
        if interval:
            params["interval"] = interval
        if agg:
            params["agg"] = agg
        if limit:
            params["limit"] = limit

        return await self.request(
            target.tenant,
            f"{self._device_path(target)}/values/timeseries",
            params=params,
        )

    async def get_attributes(
        self,
        target: DeviceTarget,
        keys: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]:
        """
        Device attributes flattened to ``{key: value}``.

        An empty key list or ``*`` fetches every attribute.
        """
        wants_all = not keys or "*" in keys
        params = None if wants_all else {"keys": ",".join(keys)}

        response = await self.request(
            target.tenant,
            f"{self._device_path(target)}/values/attributes",
            params=params,
        )

        if not isinstance(response, list):
            return {}
        return {item["key"]: item.get("value") for item in response if "key" in item}

    async def set_attributes(
        self,
        target: DeviceTarget,
        attributes: Dict[str, Any],
        scope: str = "SHARED_SCOPE",
    ) -> None:
        await self.request(
            target.tenant,
            f"{self._device_path(target)}/attributes/{scope}",
            method="POST",
            json=attributes,
        )

    # =========================================================================
    # RPC
    # =========================================================================

    async def send_rpc(
        self,
        target: DeviceTarget,
        method: str,
        params: Any,
        timeout: Optional[int] = None,
    ) -> Any:
        """
        Send an RPC to a device.

        Two-way (waits for the device reply) when a positive ``timeout``
        in milliseconds is given, one-way otherwise. Never retried beyond
        the auth retry: re-sending a toggle could flip it twice.
        """
        two_way = timeout is not None and timeout > 0

        if two_way:
            endpoint = f"/api/rpc/twoway/{target.device_id}"
            body = {"method": method, "params": params, "timeout": timeout}
        else:
            endpoint = f"/api/rpc/oneway/{target.device_id}"
            body = {"method": method, "params": params}

        logger.info(f"RPC {'two-way' if two_way else 'one-way'} to {target}: {method}")
        return await self.request(target.tenant, endpoint, method="POST", json=body)

    # =========================================================================
    # Reachability
    # =========================================================================

    async def is_online(self, target: DeviceTarget) -> bool:
        """
        Check if a device is online.

        ``last_seen`` (epoch seconds) decides when present. Without it,
        only a fresh ``status`` telemetry sample equal to "online" counts;
        the ``status`` attribute alone is never trusted.

        Raises:
            PlatformError: If the platform could not be asked. A failed
                check says nothing about the device, so it is never
                reported as offline.
        """
        attrs = await self.get_attributes(target, ["status", "last_seen"])
        now = self._clock()

        last_seen = _epoch_seconds(attrs.get("last_seen"))
        if last_seen is not None and last_seen > 0:
            age = now - last_seen
            logger.debug(f"{target} last seen {age:.0f}s ago")
            return age <= self.settings.online_threshold_seconds

        telemetry = await self.get_latest_telemetry(target, ["status"])
        reading = SensorReading.latest_from("status", telemetry)
        if reading is None:
            return False

        age = reading.age_seconds(now)
        if age is not None and age < self.settings.telemetry_fresh_seconds and isinstance(reading.value, str):
            return reading.value.strip().lower() == "online"

        return False

    async def ensure_online(self, target: DeviceTarget) -> None:
        """
        Raises:
            DeviceUnreachableError: If the device is offline.
            PlatformError: If reachability could not be checked.
        """
        if not await self.is_online(target):
            raise DeviceUnreachableError(target.device_id, target.name)

    async def test_connection(self, tenant: str) -> Tuple[bool, str]:
        """Check a tenant's credentials by obtaining a token."""
        try:
            await self.get_token(tenant)
            return True, "Connected to ThingsBoard"
        except DomainException as e:
            return False, e.message

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def aclose(self) -> None:
        """Drop all tokens and close the HTTP client."""
        self._tokens.clear()
        self._credentials.clear()
        await self._http.aclose()
        logger.info("Platform client closed")

    async def __aenter__(self) -> "ThingsBoardClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
