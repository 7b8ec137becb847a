from dataclasses import dataclass, field


@dataclass(frozen=True)
class SearchHit:
    title: str
    url: str
    snippet: str
    date: str | None = None


@dataclass(frozen=True)
class QueryRecord:
    query: str
    hits: tuple[SearchHit, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ScrapeRecord:
    """
    Evidence from one scraped URL.

    Failed fetches keep a readable placeholder in ``content`` so the oracles
    still see that the URL was tried; ``failed`` and ``error`` keep the outcome.
    """

    url: str
    content: str
    failed: bool = False
    error: str | None = None

    @classmethod
    def ok(cls, url: str, content: str) -> "ScrapeRecord":
        return cls(url=url, content=content)

    @classmethod
    def failure(cls, url: str, error: str) -> "ScrapeRecord":
        return cls(
            url=url,
            content=f"Failed to scrape: {error}",
            failed=True,
            error=error,
        )
