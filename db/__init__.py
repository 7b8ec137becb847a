"""
Shared stores for the research service.
Provides the Redis client plus the cache and rate-limit stores built on it.
"""

from db.cache_store import CacheStore, InMemoryCacheStore, RedisCacheStore
from db.engine import close_redis, get_cache_store, get_rate_limit_store, get_redis
from db.rate_limit_store import InMemoryRateLimitStore, RateLimitStore, RedisRateLimitStore

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "InMemoryRateLimitStore",
    "RateLimitStore",
    "RedisCacheStore",
    "RedisRateLimitStore",
    "close_redis",
    "get_cache_store",
    "get_rate_limit_store",
    "get_redis",
]
