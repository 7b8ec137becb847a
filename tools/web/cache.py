"""Memoizing cache for expensive, side-effecting async calls."""

import asyncio
import hashlib
import json
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from db.cache_store import CacheStore
from models.errors import CacheUnavailable
from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 60 * 60 * 6  # 6 hours
KEY_SEPARATOR = ":"

# Handed to joined callers when the leader's result is not theirs to reuse
_NOT_SHARED = object()


class MemoizingCache(Generic[T]):
    """
    Wraps ``op`` so results are reused for ``ttl_seconds``.

    The key is ``<prefix>:<sha256 of the canonical JSON of the positional args>``.
    Keyword arguments are passed to ``op`` but are not part of the key, which
    keeps per-call options such as a cancellation event out of it.

    Concurrent misses for the same key inside one process share a single
    execution of ``op`` (in-flight future registry). A shared result only reaches
    joined callers when it passes ``cache_if``; if it does not, or the leading call
    is cancelled, each joined caller runs ``op`` again with its own call options.
    Across processes two misses can still both run ``op``; the store's
    set-if-absent keeps the first result.

    If the store is unreachable the call degrades to running ``op`` directly.
    """

    def __init__(
        self,
        store: CacheStore,
        prefix: str,
        op: Callable[..., Awaitable[T]],
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        encode: Callable[[T], Any] | None = None,
        decode: Callable[[Any], T] | None = None,
        cache_if: Callable[[T], bool] | None = None,
    ):
        """
        Args:
            store: Shared cache store
            prefix: Namespace for this operation's keys
            op: The wrapped coroutine function
            ttl_seconds: Lifetime of stored entries
            encode: Turns a result into a JSON-serializable value
            decode: Inverse of ``encode``
            cache_if: Results for which this returns False are not stored
        """
        self._store = store
        self.prefix = prefix
        self._op = op
        self.ttl_seconds = ttl_seconds
        self._encode = encode or (lambda value: value)
        self._decode = decode or (lambda value: value)
        self._cache_if = cache_if
        self._in_flight: dict[str, asyncio.Future] = {}

    def make_key(self, *args: Any) -> str:
        canonical = json.dumps(list(args), sort_keys=True, separators=(",", ":"), default=str)
        digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
        return f"{self.prefix}{KEY_SEPARATOR}{digest}"

    async def get(self, *args: Any, **call_options: Any) -> T:
        key = self.make_key(*args)

        try:
            cached = await self._store.get(key)
        except CacheUnavailable as e:
            logger.warning(f"Cache unavailable, calling {self.prefix} directly: {e}")
            return await self._op(*args, **call_options)

        if cached is not None:
            logger.info(f"Cache hit for {key}")
            return self._decode(json.loads(cached))

        pending = self._in_flight.get(key)
        if pending is not None:
            logger.debug(f"Joining in-flight call for {key}")
            shared = await asyncio.shield(pending)
            if shared is _NOT_SHARED:
                logger.debug(f"In-flight call for {key} not reusable, retrying")
                return await self.get(*args, **call_options)
            return shared

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            result = await self._op(*args, **call_options)
            shareable = self._cache_if is None or self._cache_if(result)
            if shareable:
                result = await self._store_result(key, result)
            else:
                logger.debug(f"Not caching result for {key}")
        except asyncio.CancelledError:
            # Joined callers belong to other runs; let them retry
            future.set_result(_NOT_SHARED)
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark as retrieved so an unjoined future doesn't log a warning
            future.exception()
            raise
        else:
            future.set_result(result if shareable else _NOT_SHARED)
            return result
        finally:
            self._in_flight.pop(key, None)

    __call__ = get

    async def _store_result(self, key: str, result: T) -> T:
        payload = json.dumps(self._encode(result))
        try:
            written = await self._store.set_if_absent(key, payload, self.ttl_seconds)
            if written:
                return result
            # Another writer stored this key first; entries are immutable until expiry
            existing = await self._store.get(key)
        except CacheUnavailable as e:
            logger.warning(f"Cache unavailable, result for {key} not stored: {e}")
            return result

        if existing is None:
            return result
        return self._decode(json.loads(existing))
