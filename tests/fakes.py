"""Hand-written fakes shared by the test modules."""

import asyncio
from collections.abc import Sequence

from api.base_client import BaseOracleClient
from models.evidence import SearchHit
from tools.web.contracts import CrawlOutcome, CrawlResult


class FakeClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeOracleClient(BaseOracleClient):
    """
    Scripted oracle: returns queued decision objects in order and a fixed answer.
    Records every call so tests can inspect prompts and the is_final instruction.
    """

    provider_name = "fake"

    def __init__(self, actions: Sequence[dict] = (), answer_text: str = "answer"):
        super().__init__("fake-key", model_name="fake-model")
        self._actions = list(actions)
        self.answer_text = answer_text
        self.object_calls: list[dict] = []
        self.text_calls: list[dict] = []

    async def generate_object(self, system, prompt, schema, schema_name="response", **kwargs):
        self.object_calls.append({"system": system, "prompt": prompt, "schema": schema, **kwargs})
        if not self._actions:
            return {"type": "answer", "query": None, "urls": None}
        action = self._actions.pop(0)
        if isinstance(action, Exception):
            raise action
        return action

    async def generate_text(self, system, prompt, **kwargs):
        self.text_calls.append({"system": system, "prompt": prompt, **kwargs})
        return self.answer_text


class FakeSearchProvider:
    name = "fake"

    def __init__(self, results: dict[str, list[SearchHit]] | None = None, error: Exception | None = None):
        self.results = results or {}
        self.error = error
        self.calls: list[tuple[str, int]] = []

    async def search(self, query, result_count, cancel_event=None):
        self.calls.append((query, result_count))
        if self.error is not None:
            raise self.error
        return list(self.results.get(query, []))[:result_count]


class FakeScraper:
    """Stands in for the cached crawl: maps URL -> content, or an error reason."""

    def __init__(self, pages: dict[str, str] | None = None, errors: dict[str, str] | None = None):
        self.pages = pages or {}
        self.errors = errors or {}
        self.calls: list[list[str]] = []

    async def __call__(self, urls, cancel_event=None) -> CrawlResult:
        self.calls.append(list(urls))
        outcomes = []
        for url in urls:
            if url in self.errors:
                outcomes.append(CrawlOutcome(url=url, ok=False, error=self.errors[url]))
            else:
                outcomes.append(CrawlOutcome(url=url, ok=True, content=self.pages.get(url, "")))
        return CrawlResult(per_url=outcomes)


def search(query: str) -> dict:
    return {"type": "search", "query": query, "urls": None}


def scrape(*urls: str) -> dict:
    return {"type": "scrape", "query": None, "urls": list(urls)}


ANSWER = {"type": "answer", "query": None, "urls": None}


def run(coro):
    return asyncio.run(coro)
