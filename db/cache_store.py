"""Key/value stores with server-side expiry, used by the memoizing cache."""

import threading
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from models.errors import CacheUnavailable
from utils.logger import get_logger

logger = get_logger(__name__)


class CacheStore(Protocol):
    """
    Storage contract for cached results.

    Values are serialized strings. An entry is immutable until it expires and
    an expired entry reads exactly like a missing one.
    """

    async def get(self, key: str) -> str | None: ...

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store ``value`` unless a live entry exists. Returns True if written."""
        ...


class RedisCacheStore:
    """
    Cache store on Redis. Expiry is enforced by Redis itself (SET ... EX),
    and SET NX makes the first writer win for a key.
    """

    def __init__(self, client: redis.Redis):
        self._client = client

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except RedisError as e:
            raise CacheUnavailable(f"Redis GET failed: {e}") from e

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        try:
            written = await self._client.set(key, value, ex=ttl_seconds, nx=True)
        except RedisError as e:
            raise CacheUnavailable(f"Redis SET failed: {e}") from e
        return bool(written)


class InMemoryCacheStore:
    """
    Thread-safe in-memory store with TTL.

    Used when Redis is not configured and in tests. ``clock`` returns seconds
    and can be replaced to simulate expiry.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _live_value(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def get(self, key: str) -> str | None:
        with self._lock:
            return self._live_value(key)

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        with self._lock:
            if self._live_value(key) is not None:
                return False
            self._entries[key] = (value, self._clock() + ttl_seconds)
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for key in list(self._entries) if self._live_value(key) is not None)
