"""
ContextStore - evidence and step budget for a single research run.

One instance per run; never shared between runs and dropped when the run ends.
"""

from collections.abc import Iterable, Sequence

from models.errors import StepBudgetError
from models.evidence import QueryRecord, ScrapeRecord, SearchHit
from tools.web.research_pack import build_evidence_text


class ContextStore:
    def __init__(self, max_steps: int):
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self._max_steps = max_steps
        self._steps = 0
        self._queries: list[QueryRecord] = []
        self._scrapes: list[ScrapeRecord] = []

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def max_steps(self) -> int:
        return self._max_steps

    @property
    def queries(self) -> tuple[QueryRecord, ...]:
        return tuple(self._queries)

    @property
    def scrapes(self) -> tuple[ScrapeRecord, ...]:
        return tuple(self._scrapes)

    def record_search(self, query: str, hits: Sequence[SearchHit]) -> QueryRecord:
        record = QueryRecord(query=query, hits=tuple(hits))
        self._queries.append(record)
        return record

    def record_scrape(self, records: Iterable[ScrapeRecord]) -> None:
        self._scrapes.extend(records)

    def increment_step(self) -> int:
        """
        Count one completed action.

        Raises:
            StepBudgetError: if the budget is already used up
        """
        if self._steps >= self._max_steps:
            raise StepBudgetError(
                f"Step budget exhausted ({self._steps}/{self._max_steps}); "
                "the loop must answer instead of taking another action"
            )
        self._steps += 1
        return self._steps

    def has_budget(self) -> bool:
        return self._steps < self._max_steps

    def render_evidence(self) -> str:
        return build_evidence_text(self._queries, self._scrapes)

    def source_urls(self) -> list[str]:
        """Evidence URLs in first-seen order, without duplicates."""
        seen: dict[str, None] = {}
        for record in self._queries:
            for hit in record.hits:
                seen.setdefault(hit.url, None)
        for scrape in self._scrapes:
            if not scrape.failed:
                seen.setdefault(scrape.url, None)
        return list(seen)
