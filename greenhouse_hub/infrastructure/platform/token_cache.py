"""
Per-tenant session token cache.
"""
import asyncio
import logging
import time
from typing import Callable, Dict, Optional

from ...domain.entities.session import SessionToken

logger = logging.getLogger(__name__)


class TokenCache:
    """
    Holds at most one SessionToken per tenant.

    Tokens are swapped as whole frozen values, so a reader never sees a
    half-written token. ``lock_for`` gives callers a per-tenant lock to
    serialize logins; the cache itself never awaits.
    """

    def __init__(
        self,
        expiry_buffer: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self.expiry_buffer = expiry_buffer
        self._clock = clock
        self._tokens: Dict[str, SessionToken] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def get_valid(self, tenant: str) -> Optional[SessionToken]:
        """Cached token for ``tenant`` if it is outside the expiry buffer."""
        token = self._tokens.get(tenant)
        if token is not None and token.is_valid(self._clock(), self.expiry_buffer):
            return token
        return None

    def peek(self, tenant: str) -> Optional[SessionToken]:
        """Cached token regardless of expiry."""
        return self._tokens.get(tenant)

    def store(self, tenant: str, token: SessionToken) -> None:
        self._tokens[tenant] = token

    def invalidate(self, tenant: str, token: Optional[str] = None) -> bool:
        """
        Drop the cached token.

        When ``token`` is given, only drop it if it is still the cached
        one, so a stale rejection cannot evict a fresh login.
        """
        current = self._tokens.get(tenant)
        if current is None:
            return False
        if token is not None and current.token != token:
            return False
        del self._tokens[tenant]
        logger.debug(f"Session token invalidated for tenant {tenant}")
        return True

    def lock_for(self, tenant: str) -> asyncio.Lock:
        lock = self._locks.get(tenant)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[tenant] = lock
        return lock

    def clear(self) -> None:
        self._tokens.clear()
        self._locks.clear()

    def __contains__(self, tenant: str) -> bool:
        return tenant in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)
