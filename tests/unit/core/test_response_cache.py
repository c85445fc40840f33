"""Unit tests for response cache backends."""

from unittest.mock import AsyncMock

import pytest

from src.catalog.core.services import (
    CachedResponse,
    InMemoryResponseCache,
    RedisResponseCache,
    create_response_cache,
)


@pytest.fixture
def cached() -> CachedResponse:
    return CachedResponse(status_code=200, media_type="application/json", body='{"ok": true}')


class TestInMemoryResponseCache:
    """Test the in-process cache with an injected clock."""

    async def test_miss(self, response_cache):
        assert await response_cache.get("missing") is None

    async def test_entry_expires_after_ttl(self, response_cache, clock, cached):
        """Should serve the entry until its expiry passes."""
        await response_cache.set("synchronous:page=0", cached, ttl_seconds=5)

        clock.advance(4.9)
        assert await response_cache.get("synchronous:page=0") == cached

        clock.advance(0.2)
        assert await response_cache.get("synchronous:page=0") is None

    async def test_entry_without_ttl_never_expires(self, response_cache, clock, cached):
        await response_cache.set("asynchronous:page=0", cached, ttl_seconds=None)

        clock.advance(10**9)

        assert await response_cache.get("asynchronous:page=0") == cached

    async def test_bounded_size(self, clock, cached):
        cache = InMemoryResponseCache(max_entries=2, timer=clock)

        for key in ("a", "b", "c"):
            await cache.set(key, cached, ttl_seconds=None)

        assert len(cache) == 2

    async def test_always_available(self, response_cache):
        assert await response_cache.is_available() is True


class TestRedisResponseCache:
    """Test the Redis backend against a mocked client."""

    @pytest.fixture
    def redis_client(self) -> AsyncMock:
        return AsyncMock()

    @pytest.fixture
    def cache(self, redis_client) -> RedisResponseCache:
        return RedisResponseCache(redis_client, key_prefix="catalog")

    async def test_set_uses_prefix_and_expiry(self, cache, redis_client, cached):
        await cache.set("synchronous:page=0", cached, ttl_seconds=5)

        redis_client.set.assert_awaited_once_with(
            "catalog:synchronous:page=0", cached.model_dump_json(), ex=5
        )

    async def test_get_decodes_stored_json(self, cache, redis_client, cached):
        redis_client.get.return_value = cached.model_dump_json().encode("utf-8")

        assert await cache.get("key") == cached
        redis_client.get.assert_awaited_once_with("catalog:key")

    async def test_get_miss(self, cache, redis_client):
        redis_client.get.return_value = None

        assert await cache.get("key") is None

    async def test_failures_raise_runtime_error(self, cache, redis_client, cached):
        redis_client.get.side_effect = ConnectionError("down")
        redis_client.set.side_effect = ConnectionError("down")

        with pytest.raises(RuntimeError, match="Redis get failed"):
            await cache.get("key")
        with pytest.raises(RuntimeError, match="Redis set failed"):
            await cache.set("key", cached, ttl_seconds=None)

    async def test_availability_follows_ping(self, cache, redis_client):
        assert await cache.is_available() is True

        redis_client.ping.side_effect = ConnectionError("down")
        assert await cache.is_available() is False

    async def test_close(self, cache, redis_client):
        await cache.close()

        redis_client.aclose.assert_awaited_once()


class TestCreateResponseCache:
    """Test backend selection."""

    async def test_memory_backend(self):
        cache = await create_response_cache(backend="memory", max_entries=3)

        assert isinstance(cache, InMemoryResponseCache)

    async def test_redis_without_url_falls_back(self):
        cache = await create_response_cache(backend="redis", redis_url=None)

        assert isinstance(cache, InMemoryResponseCache)

    async def test_unreachable_redis_falls_back(self):
        cache = await create_response_cache(
            backend="redis", redis_url="redis://127.0.0.1:1/0", socket_timeout=0.2
        )

        assert isinstance(cache, InMemoryResponseCache)
