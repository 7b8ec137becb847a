"""Serper (Google results) search provider over plain HTTP."""

import asyncio
import os
from typing import Any

import httpx

from models.errors import ProviderError, RunCancelled
from models.evidence import SearchHit
from utils.cancellation import Cancelled, run_cancellable
from utils.logger import get_logger

logger = get_logger(__name__)

SERPER_SEARCH_URL = "https://google.serper.dev/search"
DEFAULT_TIMEOUT_S = 10.0


def _to_hits(payload: dict[str, Any], result_count: int) -> list[SearchHit]:
    hits: list[SearchHit] = []
    for item in (payload.get("organic") or [])[:result_count]:
        url = str(item.get("link") or "").strip()
        if not url:
            continue
        hits.append(
            SearchHit(
                title=str(item.get("title") or "").strip() or url,
                url=url,
                snippet=str(item.get("snippet") or "").strip(),
                date=item.get("date") or None,
            )
        )
    return hits


class SerperSearchProvider:
    name = "serper"

    def __init__(
        self,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ):
        self.api_key = api_key or os.getenv("SERPER_API_KEY")
        if not self.api_key:
            raise ValueError("SERPER_API_KEY not found in environment")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def search(
        self,
        query: str,
        result_count: int,
        cancel_event: asyncio.Event | None = None,
    ) -> list[SearchHit]:
        logger.info(f"Serper search: '{query}' (num={result_count})")
        try:
            response = await run_cancellable(
                self._client.post(
                    SERPER_SEARCH_URL,
                    headers={"X-API-KEY": self.api_key, "Content-Type": "application/json"},
                    json={"q": query, "num": result_count},
                ),
                cancel_event,
            )
            response.raise_for_status()
            payload = response.json()
        except Cancelled as e:
            raise RunCancelled("Search cancelled") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Serper search failed: {e}")
            raise ProviderError(self.name, str(e)) from e

        hits = _to_hits(payload, result_count)
        logger.info(f"Serper returned {len(hits)} hits")
        return hits

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
