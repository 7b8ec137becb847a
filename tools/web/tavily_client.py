"""Tavily search provider for the research loop.

Tavily returns ranked results with clean snippets; the loop only needs the
title, URL, snippet and (for news results) the publication date.
"""

import asyncio
import os

from models.errors import ProviderError, RunCancelled
from models.evidence import SearchHit
from utils.cancellation import Cancelled, run_cancellable
from utils.logger import get_logger

logger = get_logger(__name__)


class TavilySearchProvider:
    """
    Tavily-powered search provider.
    """

    name = "tavily"

    def __init__(self, api_key: str | None = None, search_depth: str = "basic"):
        """
        Initialize Tavily client.

        Args:
            api_key: Tavily API key (defaults to TAVILY_API_KEY env var)
            search_depth: "basic" (faster) or "advanced" (deeper)
        """
        self.api_key = api_key or os.getenv("TAVILY_API_KEY")

        if not self.api_key:
            raise ValueError("TAVILY_API_KEY not found in environment")

        # Lazy import so deployments on Serper don't need tavily installed
        try:
            from tavily import AsyncTavilyClient
        except ModuleNotFoundError as e:
            raise ModuleNotFoundError(
                "Optional dependency 'tavily' is not installed. "
                "Install it to search with Tavily: pip install tavily-python"
            ) from e

        self.client = AsyncTavilyClient(api_key=self.api_key)
        self.search_depth = search_depth
        logger.info("Tavily client initialized")

    async def search(
        self,
        query: str,
        result_count: int,
        cancel_event: asyncio.Event | None = None,
    ) -> list[SearchHit]:
        """
        Search the web using Tavily API.

        Args:
            query: Search query
            result_count: Maximum number of hits
            cancel_event: Optional shared cancellation signal

        Returns:
            Ordered list of SearchHit

        Raises:
            ProviderError: if the Tavily call fails
            RunCancelled: if the cancellation signal fires first
        """
        logger.info(f"Tavily search: '{query}' (max_results={result_count})")

        try:
            response = await run_cancellable(
                self.client.search(
                    query=query,
                    max_results=result_count,
                    search_depth=self.search_depth,
                    include_answer=False,
                    include_raw_content=False,
                ),
                cancel_event,
            )
        except Cancelled as e:
            raise RunCancelled("Search cancelled") from e
        except Exception as e:
            logger.error(f"Tavily search failed: {e}", exc_info=True)
            raise ProviderError(self.name, str(e)) from e

        hits = [
            SearchHit(
                title=result.get("title") or "Untitled",
                url=result.get("url", ""),
                snippet=result.get("content", ""),
                date=result.get("published_date"),
            )
            for result in response.get("results", [])
            if result.get("url")
        ]

        logger.info(f"Tavily returned {len(hits)} hits")
        return hits
