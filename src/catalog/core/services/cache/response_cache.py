"""Response cache interface and implementations.

Stores fully rendered responses keyed by a fixed prefix plus the request's
query parameters, with a Redis backend and an in-memory fallback.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from cachetools import TLRUCache
from loguru import logger
from pydantic import BaseModel


class CachedResponse(BaseModel):
    """A rendered response as stored in the cache."""

    status_code: int
    media_type: str | None = None
    body: str


class ResponseCache(ABC):
    """Abstract interface for response cache backends."""

    @abstractmethod
    async def get(self, key: str) -> CachedResponse | None:
        """Return the cached response, or None if missing or expired."""

    @abstractmethod
    async def set(self, key: str, value: CachedResponse, ttl_seconds: int | None) -> None:
        """Store a response.

        Args:
            key: Cache key
            value: Rendered response
            ttl_seconds: Expiry in seconds; None keeps the entry until evicted
        """

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the backend can serve requests."""

    async def close(self) -> None:
        """Release backend resources."""


class InMemoryResponseCache(ResponseCache):
    """Bounded in-process cache with per-entry expiry.

    ``timer`` is the clock used for expiry, injectable for tests.
    """

    def __init__(self, max_entries: int = 1024, timer: Callable[[], float] = time.monotonic):
        self._cache: TLRUCache = TLRUCache(
            maxsize=max_entries, ttu=self._time_to_use, timer=timer
        )

    @staticmethod
    def _time_to_use(_key: str, value: tuple[CachedResponse, int | None], now: float) -> float:
        ttl_seconds = value[1]
        if ttl_seconds is None:
            return float("inf")
        return now + ttl_seconds

    async def get(self, key: str) -> CachedResponse | None:
        entry = self._cache.get(key)
        return entry[0] if entry is not None else None

    async def set(self, key: str, value: CachedResponse, ttl_seconds: int | None) -> None:
        self._cache[key] = (value, ttl_seconds)

    async def is_available(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._cache)


class RedisResponseCache(ResponseCache):
    """Redis-backed response cache."""

    def __init__(self, redis_client, key_prefix: str = "catalog"):
        self._redis = redis_client
        self._key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    async def get(self, key: str) -> CachedResponse | None:
        try:
            data = await self._redis.get(self._key(key))
        except Exception as e:
            raise RuntimeError(f"Redis get failed: {e}") from e
        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return CachedResponse.model_validate_json(data)

    async def set(self, key: str, value: CachedResponse, ttl_seconds: int | None) -> None:
        try:
            await self._redis.set(self._key(key), value.model_dump_json(), ex=ttl_seconds)
        except Exception as e:
            raise RuntimeError(f"Redis set failed: {e}") from e

    async def is_available(self) -> bool:
        try:
            await self._redis.ping()
            return True
        except Exception:
            return False

    async def close(self) -> None:
        await self._redis.aclose()


async def create_response_cache(
    backend: str,
    redis_url: str | None = None,
    key_prefix: str = "catalog",
    max_entries: int = 1024,
    socket_timeout: float = 2.0,
) -> ResponseCache:
    """Build the configured cache, falling back to memory when Redis is unreachable."""
    if backend == "redis" and redis_url:
        import redis.asyncio as redis_async

        client = redis_async.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )
        cache = RedisResponseCache(client, key_prefix=key_prefix)
        if await cache.is_available():
            logger.info("Response cache: Redis connected")
            return cache
        await cache.close()
        logger.warning("Redis unavailable, using in-memory response cache")
    elif backend == "redis":
        logger.warning("Redis cache requested without a URL, using in-memory response cache")

    return InMemoryResponseCache(max_entries=max_entries)
