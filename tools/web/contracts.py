"""Data contracts for web research module."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Protocol

from models.evidence import SearchHit


@dataclass(frozen=True)
class CrawlOutcome:
    """Outcome of fetching one URL: content on success, error reason otherwise."""

    url: str
    ok: bool
    content: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "ok": self.ok, "content": self.content, "error": self.error}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CrawlOutcome":
        return cls(
            url=data["url"],
            ok=bool(data["ok"]),
            content=data.get("content"),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class CrawlResult:
    """Result of a bulk crawl. ``per_url`` keeps the order of the requested URLs."""

    per_url: list[CrawlOutcome] = field(default_factory=list)

    @property
    def overall_success(self) -> bool:
        return all(outcome.ok for outcome in self.per_url)

    @property
    def failures(self) -> list[CrawlOutcome]:
        return [outcome for outcome in self.per_url if not outcome.ok]

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_success": self.overall_success,
            "per_url": [outcome.to_dict() for outcome in self.per_url],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CrawlResult":
        return cls(per_url=[CrawlOutcome.from_dict(item) for item in data.get("per_url", [])])


class SearchProvider(Protocol):
    """Keyword web search. Errors surface as ProviderError."""

    name: str

    async def search(
        self,
        query: str,
        result_count: int,
        cancel_event: asyncio.Event | None = None,
    ) -> list[SearchHit]: ...
