"""
Redis connection for the shared cache and rate-limit stores.
Configured via the REDIS_URL environment variable; without it the process
falls back to in-memory stores (single process only).
"""

import os

import redis.asyncio as redis

from db.cache_store import CacheStore, InMemoryCacheStore, RedisCacheStore
from db.rate_limit_store import InMemoryRateLimitStore, RateLimitStore, RedisRateLimitStore
from utils.logger import get_logger

logger = get_logger(__name__)


def get_redis_url() -> str | None:
    """
    Retrieve REDIS_URL from environment.

    Example URLs:
        Local: redis://localhost:6379/0
        TLS:   rediss://:password@cache.example.com:6380/0
    """
    return os.getenv("REDIS_URL") or None


def create_redis_client(redis_url: str) -> redis.Redis:
    """
    Create an asyncio Redis client with string responses.

    Configuration via environment variables:
    - REDIS_MAX_CONNECTIONS: connection pool size (default: 20)
    - REDIS_SOCKET_TIMEOUT_S: socket timeout in seconds (default: 5)
    """
    max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", "20"))
    socket_timeout = float(os.getenv("REDIS_SOCKET_TIMEOUT_S", "5"))

    logger.info(
        "Creating Redis client",
        extra={
            "extra_fields": {
                "max_connections": max_connections,
                "socket_timeout_s": socket_timeout,
                "tls": redis_url.startswith("rediss://"),
            }
        },
    )

    return redis.from_url(
        redis_url,
        decode_responses=True,
        max_connections=max_connections,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )


# Lazy client singleton
_CLIENT: redis.Redis | None = None


def get_redis(redis_url: str | None = None) -> redis.Redis | None:
    """
    Get or create the Redis client (lazy initialization).

    Returns None when no Redis URL is configured. The client is created on first
    call, not at import time, so importing this module never needs Redis.
    """
    global _CLIENT
    if _CLIENT is None:
        url = redis_url or get_redis_url()
        if not url:
            return None
        _CLIENT = create_redis_client(url)
    return _CLIENT


async def close_redis() -> None:
    """Close the shared client, if one was created."""
    global _CLIENT
    if _CLIENT is not None:
        await _CLIENT.aclose()
        _CLIENT = None
        logger.info("Redis client closed")


def get_cache_store(redis_url: str | None = None) -> CacheStore:
    """Redis-backed cache store when configured, in-memory otherwise."""
    client = get_redis(redis_url)
    if client is None:
        logger.warning("REDIS_URL not set; using in-memory cache store (not shared across processes)")
        return InMemoryCacheStore()
    return RedisCacheStore(client)


def get_rate_limit_store(redis_url: str | None = None) -> RateLimitStore:
    """Redis-backed rate-limit store when configured, in-memory otherwise."""
    client = get_redis(redis_url)
    if client is None:
        logger.warning(
            "REDIS_URL not set; using in-memory rate-limit store (not shared across processes)"
        )
        return InMemoryRateLimitStore()
    return RedisRateLimitStore(client)
