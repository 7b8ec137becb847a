"""
Fixed-window rate limiter backed by a shared counter store.

Usage:
    limiter = RateLimiter(get_rate_limit_store())
    config = RateLimitConfig(max_requests=1, window_ms=20_000, max_retries=3, key_prefix="research")

    check = await limiter.check(config)
    if not check.allowed and not await check.retry():
        raise RateLimitExceeded(...)
    await limiter.record(config)

``enforce(config)`` runs exactly that sequence.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from db.rate_limit_store import RateLimitStore
from models.errors import RateLimitExceeded
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitConfig:
    max_requests: int
    window_ms: int
    max_retries: int
    key_prefix: str


@dataclass(frozen=True)
class RateLimitCheck:
    allowed: bool
    retry: Callable[[], Awaitable[bool]]
    remaining: int = 0
    reset_in_ms: int = 0


class RateLimiter:
    """
    Counts requests per fixed window of ``window_ms``.

    ``check`` only reads the counter and ``record`` only increments it, so the
    caller decides in between whether the protected work goes ahead.
    """

    def __init__(
        self,
        store: RateLimitStore,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            store: Shared counter store
            clock: Current time in seconds (wall clock, so processes agree on windows)
            sleep: Awaitable sleep in seconds, replaceable in tests
        """
        self._store = store
        self._clock = clock
        self._sleep = sleep

    def _window(self, config: RateLimitConfig) -> tuple[str, int]:
        """Return (window key, ms until the window ends)."""
        now_ms = int(self._clock() * 1000)
        window_start = now_ms - (now_ms % config.window_ms)
        reset_in_ms = window_start + config.window_ms - now_ms
        return f"rate_limit:{config.key_prefix}:{window_start}", reset_in_ms

    async def _is_allowed(self, config: RateLimitConfig) -> tuple[bool, int, int]:
        key, reset_in_ms = self._window(config)
        count = await self._store.get_count(key)
        return count < config.max_requests, max(config.max_requests - count, 0), reset_in_ms

    async def check(self, config: RateLimitConfig) -> RateLimitCheck:
        allowed, remaining, reset_in_ms = await self._is_allowed(config)

        async def retry() -> bool:
            for attempt in range(1, config.max_retries + 1):
                _, wait_ms = self._window(config)
                wait_ms = min(max(wait_ms, 1), config.window_ms)
                logger.warning(
                    "Rate limit exceeded, waiting",
                    extra={
                        "extra_fields": {
                            "key_prefix": config.key_prefix,
                            "attempt": attempt,
                            "max_retries": config.max_retries,
                            "wait_ms": wait_ms,
                        }
                    },
                )
                await self._sleep(wait_ms / 1000)
                ok, _, _ = await self._is_allowed(config)
                if ok:
                    return True
            return False

        return RateLimitCheck(
            allowed=allowed, retry=retry, remaining=remaining, reset_in_ms=reset_in_ms
        )

    async def record(self, config: RateLimitConfig) -> int:
        key, _ = self._window(config)
        return await self._store.increment(key, config.window_ms)

    async def enforce(self, config: RateLimitConfig) -> None:
        """
        Check, wait with bounded retries if needed, then record.

        Raises:
            RateLimitExceeded: if the window is still full after all retries
        """
        check = await self.check(config)
        if not check.allowed:
            if not await check.retry():
                _, reset_in_ms = self._window(config)
                raise RateLimitExceeded(config.key_prefix, retry_after_s=reset_in_ms / 1000)
        await self.record(config)
