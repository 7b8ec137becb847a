"""
LoopOrchestrator - the search / scrape / answer research loop.

Key guarantees:
- Strictly sequential: one action is decided, executed and recorded before the next
- ``steps`` grows by exactly one per completed search or scrape, never past ``max_steps``
- Every run ends in an answer: chosen by the oracle, or forced when the budget runs out
- Per-URL scrape failures are recorded as evidence, never raised
"""

import asyncio
import time
import uuid
from collections.abc import Awaitable, Callable
from enum import Enum

from models.action import Action, AnswerAction, ScrapeAction, SearchAction
from models.errors import ActionValidationError, RunCancelled
from models.evidence import ScrapeRecord
from models.research_response import ResearchAnswer
from orchestrator.action_selector import ActionSelector
from orchestrator.answer_synthesizer import AnswerSynthesizer
from orchestrator.context import ContextStore
from tools.web.contracts import CrawlResult, SearchProvider
from utils.logger import current_run_id, get_logger

logger = get_logger(__name__)

ScrapeFn = Callable[..., Awaitable[CrawlResult]]


class LoopState(str, Enum):
    RUNNING = "running"
    ANSWERING = "answering"
    BUDGET_EXHAUSTED = "budget_exhausted"


def to_scrape_records(result: CrawlResult) -> list[ScrapeRecord]:
    return [
        ScrapeRecord.ok(outcome.url, outcome.content or "")
        if outcome.ok
        else ScrapeRecord.failure(outcome.url, outcome.error or "unknown error")
        for outcome in result.per_url
    ]


class LoopOrchestrator:
    def __init__(
        self,
        selector: ActionSelector,
        synthesizer: AnswerSynthesizer,
        search_provider: SearchProvider,
        scrape: ScrapeFn,
        max_steps: int = 10,
        search_result_count: int = 3,
    ):
        """
        Args:
            selector: Decision oracle wrapper
            synthesizer: Generation oracle wrapper
            search_provider: Keyword web search
            scrape: ``scrape(urls, cancel_event=...)``, normally a MemoizingCache
                around BulkCrawler.crawl
            max_steps: Search/scrape budget for one run
            search_result_count: Hits requested per search
        """
        self._selector = selector
        self._synthesizer = synthesizer
        self._search_provider = search_provider
        self._scrape = scrape
        self.max_steps = max_steps
        self.search_result_count = search_result_count
        self.state = LoopState.RUNNING

    async def run(
        self,
        question: str,
        cancel_event: asyncio.Event | None = None,
        request_id: str | None = None,
    ) -> ResearchAnswer:
        """
        Drive one research run to an answer.

        Raises:
            ActionValidationError: decision oracle output violated the action schema
            ProviderError: the search provider failed
            OracleError: an oracle call failed
            RunCancelled: the cancellation signal fired
        """
        run_id = request_id or str(uuid.uuid4())
        token = current_run_id.set(run_id)
        try:
            return await self._run(question, cancel_event, run_id)
        finally:
            current_run_id.reset(token)

    async def _run(
        self, question: str, cancel_event: asyncio.Event | None, run_id: str
    ) -> ResearchAnswer:
        started = time.perf_counter()
        ctx = ContextStore(self.max_steps)
        self.state = LoopState.RUNNING

        while ctx.has_budget():
            self._raise_if_cancelled(cancel_event, ctx)

            action = await self._selector.next_action(question, ctx.render_evidence())
            logger.info(
                f"Action decided: {action.type}",
                extra={"extra_fields": {"step": ctx.steps, "action": action.type}},
            )

            if isinstance(action, AnswerAction):
                self.state = LoopState.ANSWERING
                return await self._answer(question, ctx, run_id, started, is_final=False)

            await self._execute(action, ctx, cancel_event)
            ctx.increment_step()

        self.state = LoopState.BUDGET_EXHAUSTED
        logger.warning(
            "Step budget exhausted, forcing an answer",
            extra={"extra_fields": {"steps": ctx.steps}},
        )
        return await self._answer(question, ctx, run_id, started, is_final=True)

    async def _execute(
        self, action: Action, ctx: ContextStore, cancel_event: asyncio.Event | None
    ) -> None:
        if isinstance(action, SearchAction):
            hits = await self._search_provider.search(
                action.query, self.search_result_count, cancel_event
            )
            ctx.record_search(action.query, hits)
        elif isinstance(action, ScrapeAction):
            result = await self._scrape(list(action.urls), cancel_event=cancel_event)
            ctx.record_scrape(to_scrape_records(result))
        else:
            raise ActionValidationError(f"Unhandled action: {action!r}")

    async def _answer(
        self,
        question: str,
        ctx: ContextStore,
        run_id: str,
        started: float,
        *,
        is_final: bool,
    ) -> ResearchAnswer:
        text = await self._synthesizer.answer(question, ctx.render_evidence(), is_final=is_final)
        latency_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Research run finished",
            extra={
                "extra_fields": {
                    "state": self.state.value,
                    "steps": ctx.steps,
                    "latency_ms": latency_ms,
                }
            },
        )
        return ResearchAnswer(
            request_id=run_id,
            question=question,
            text=text,
            state="budget_exhausted" if is_final else "answered",
            steps=ctx.steps,
            max_steps=ctx.max_steps,
            sources=ctx.source_urls(),
            latency_ms=latency_ms,
        )

    @staticmethod
    def _raise_if_cancelled(cancel_event: asyncio.Event | None, ctx: ContextStore) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RunCancelled(
                "Research run cancelled",
                details={"steps": ctx.steps, "sources": ctx.source_urls()},
            )

