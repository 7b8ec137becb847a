"""Web research tools: search providers, bulk crawler, memoizing cache, rate limiter."""

from .cache import MemoizingCache
from .contracts import CrawlOutcome, CrawlResult, SearchProvider
from .crawler import BulkCrawler
from .factory import create_crawler, create_search_provider
from .rate_limiter import RateLimitCheck, RateLimitConfig, RateLimiter

__all__ = [
    "BulkCrawler",
    "CrawlOutcome",
    "CrawlResult",
    "MemoizingCache",
    "RateLimitCheck",
    "RateLimitConfig",
    "RateLimiter",
    "SearchProvider",
    "create_crawler",
    "create_search_provider",
]
