"""Factories for search providers and the crawler from environment configuration."""

from config.config import Config, SearchProviderType
from utils.logger import get_logger

from .contracts import SearchProvider
from .crawler import BulkCrawler

logger = get_logger(__name__)


def create_search_provider(config: Config) -> SearchProvider:
    """
    Create the configured search provider.

    Environment variables:
        SEARCH_PROVIDER: "tavily" (default) or "serper"
        TAVILY_API_KEY / SERPER_API_KEY: key for the selected provider

    Raises:
        ValueError: If the provider is unknown or its API key is missing
    """
    provider = config.SEARCH_PROVIDER

    if provider == SearchProviderType.TAVILY.value:
        from .tavily_client import TavilySearchProvider

        logger.info("Using Tavily for web search")
        return TavilySearchProvider(api_key=config.TAVILY_API_KEY)

    if provider == SearchProviderType.SERPER.value:
        from .serper_client import SerperSearchProvider

        logger.info("Using Serper for web search")
        return SerperSearchProvider(api_key=config.SERPER_API_KEY)

    raise ValueError(f"Unsupported SEARCH_PROVIDER: {provider}")


def create_crawler(config: Config) -> BulkCrawler:
    """
    Environment variables:
        CRAWL_TIMEOUT_S: per-URL timeout (default: 15)
        CRAWL_MAX_CONCURRENCY: worker pool size (default: 5)
        CRAWL_MAX_CONTENT_CHARS: truncation length for page text (default: 20000)
    """
    return BulkCrawler(
        timeout_s=config.CRAWL_TIMEOUT_S,
        max_concurrency=config.CRAWL_MAX_CONCURRENCY,
        max_content_chars=config.CRAWL_MAX_CONTENT_CHARS,
    )
