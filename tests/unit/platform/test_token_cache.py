"""
Unit tests for the per-tenant token cache.
"""
from greenhouse_hub.domain.entities.session import SessionToken
from greenhouse_hub.infrastructure.platform.token_cache import TokenCache

from tests.conftest import ManualClock


def _token(value: str, expires_at: float) -> SessionToken:
    return SessionToken(token=value, refresh_token=None, expires_at=expires_at)


class TestTokenCache:
    """Tests for storing and expiring tokens."""

    def test_valid_token_is_returned(self):
        clock = ManualClock(1000.0)
        cache = TokenCache(expiry_buffer=60.0, clock=clock)
        cache.store("a", _token("t1", 2000.0))

        assert cache.get_valid("a").token == "t1"
        assert "a" in cache
        assert len(cache) == 1

    def test_token_inside_buffer_is_not_valid(self):
        clock = ManualClock(1000.0)
        cache = TokenCache(expiry_buffer=60.0, clock=clock)
        cache.store("a", _token("t1", 2000.0))

        clock.advance(941.0)

        assert cache.get_valid("a") is None
        assert cache.peek("a").token == "t1"

    def test_tenants_are_isolated(self):
        cache = TokenCache(clock=ManualClock(0.0))
        cache.store("a", _token("ta", 10_000.0))

        assert cache.get_valid("b") is None
        cache.invalidate("b")
        assert cache.get_valid("a").token == "ta"

    def test_invalidate_only_drops_matching_token(self):
        cache = TokenCache(clock=ManualClock(0.0))
        cache.store("a", _token("fresh", 10_000.0))

        assert cache.invalidate("a", "stale") is False
        assert cache.get_valid("a").token == "fresh"

        assert cache.invalidate("a", "fresh") is True
        assert "a" not in cache

    def test_lock_is_per_tenant(self):
        cache = TokenCache()

        assert cache.lock_for("a") is cache.lock_for("a")
        assert cache.lock_for("a") is not cache.lock_for("b")

    def test_clear(self):
        cache = TokenCache(clock=ManualClock(0.0))
        cache.store("a", _token("ta", 10_000.0))
        cache.store("b", _token("tb", 10_000.0))

        cache.clear()

        assert len(cache) == 0
