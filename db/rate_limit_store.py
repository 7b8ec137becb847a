"""Counter stores for fixed-window rate limiting."""

import threading
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from models.errors import StoreUnavailable

# INCR and PEXPIRE run as one script so a window key can never be left without
# an expiry, and concurrent increments are never lost.
_INCREMENT_WITH_EXPIRY = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('PEXPIRE', KEYS[1], ARGV[1])
end
return count
"""


class RateLimitStore(Protocol):
    async def get_count(self, key: str) -> int: ...

    async def increment(self, key: str, window_ms: int) -> int:
        """Atomically increment ``key``; the first increment sets its expiry."""
        ...


class RedisRateLimitStore:
    def __init__(self, client: redis.Redis):
        self._client = client
        self._increment = client.register_script(_INCREMENT_WITH_EXPIRY)

    async def get_count(self, key: str) -> int:
        try:
            value = await self._client.get(key)
        except RedisError as e:
            raise StoreUnavailable(f"Redis GET failed: {e}") from e
        return int(value) if value else 0

    async def increment(self, key: str, window_ms: int) -> int:
        try:
            count = await self._increment(keys=[key], args=[window_ms])
        except RedisError as e:
            raise StoreUnavailable(f"Redis INCR failed: {e}") from e
        return int(count)


class InMemoryRateLimitStore:
    """In-process counterpart of RedisRateLimitStore. ``clock`` returns seconds."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._counters: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _live_count(self, key: str) -> int:
        entry = self._counters.get(key)
        if entry is None:
            return 0
        count, expires_at = entry
        if self._clock() >= expires_at:
            del self._counters[key]
            return 0
        return count

    async def get_count(self, key: str) -> int:
        with self._lock:
            return self._live_count(key)

    async def increment(self, key: str, window_ms: int) -> int:
        with self._lock:
            count = self._live_count(key)
            if count == 0:
                expires_at = self._clock() + window_ms / 1000
            else:
                expires_at = self._counters[key][1]
            self._counters[key] = (count + 1, expires_at)
            return count + 1
