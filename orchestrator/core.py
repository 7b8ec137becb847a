"""
ResearchService - entry point that guards and launches research runs.

Key guarantees:
- CLI/API layers stay thin (no provider imports there)
- Every run is admitted by the shared rate limiter first; a window that stays
  full after the bounded retries rejects the run with RateLimitExceeded
- Each run gets a fresh LoopOrchestrator and ContextStore; only the cache and
  rate-limit stores are shared between concurrent runs
"""

import asyncio
import uuid

from api.base_client import BaseOracleClient
from config.config import Config
from db.cache_store import CacheStore
from db.engine import close_redis
from db.rate_limit_store import RateLimitStore
from models.research_response import ResearchAnswer
from orchestrator.action_selector import ActionSelector
from orchestrator.answer_synthesizer import AnswerSynthesizer
from orchestrator.loop import LoopOrchestrator
from tools.web.cache import MemoizingCache
from tools.web.contracts import CrawlResult, SearchProvider
from tools.web.crawler import BulkCrawler
from tools.web.rate_limiter import RateLimitConfig, RateLimiter
from utils.logger import get_logger

logger = get_logger(__name__)

SCRAPE_CACHE_PREFIX = "scrape_pages"


def _cacheable_crawl(result: CrawlResult) -> bool:
    # A cancelled fetch says nothing about the page; don't pin it for hours
    return not any(outcome.error == "cancelled" for outcome in result.per_url)


class ResearchService:
    def __init__(
        self,
        *,
        decision_client: BaseOracleClient,
        answer_client: BaseOracleClient,
        search_provider: SearchProvider,
        crawler: BulkCrawler,
        cache_store: CacheStore,
        rate_limit_store: RateLimitStore,
        rate_limit: RateLimitConfig,
        max_steps: int = 10,
        search_result_count: int = 3,
        cache_ttl_seconds: int = 60 * 60 * 6,
        decision_model: str | None = None,
        answer_model: str | None = None,
        rate_limiter: RateLimiter | None = None,
    ):
        self._decision_client = decision_client
        self._answer_client = answer_client
        self.search_provider = search_provider
        self.crawler = crawler
        self.selector = ActionSelector(decision_client, model=decision_model)
        self.synthesizer = AnswerSynthesizer(answer_client, model=answer_model)
        self.scrape_cache: MemoizingCache[CrawlResult] = MemoizingCache(
            store=cache_store,
            prefix=SCRAPE_CACHE_PREFIX,
            op=crawler.crawl,
            ttl_seconds=cache_ttl_seconds,
            encode=CrawlResult.to_dict,
            decode=CrawlResult.from_dict,
            cache_if=_cacheable_crawl,
        )
        self.rate_limiter = rate_limiter or RateLimiter(rate_limit_store)
        self.rate_limit = rate_limit
        self.max_steps = max_steps
        self.search_result_count = search_result_count

    async def ask(
        self,
        question: str,
        *,
        max_steps: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ResearchAnswer:
        """
        Answer ``question`` with a rate-limited research run.

        Raises:
            RateLimitExceeded: if the entry window stayed full after retries
            ActionValidationError, ProviderError, OracleError, RunCancelled:
                from the run itself
        """
        question = question.strip()
        if not question:
            raise ValueError("question must not be empty")
        max_steps = self.max_steps if max_steps is None else max_steps
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")

        await self.rate_limiter.enforce(self.rate_limit)

        request_id = str(uuid.uuid4())
        logger.info(
            "Starting research run",
            extra={"extra_fields": {"run_id": request_id, "question": question[:200]}},
        )

        loop = LoopOrchestrator(
            selector=self.selector,
            synthesizer=self.synthesizer,
            search_provider=self.search_provider,
            scrape=self.scrape_cache,
            max_steps=max_steps,
            search_result_count=self.search_result_count,
        )
        return await loop.run(question, cancel_event=cancel_event, request_id=request_id)

    async def aclose(self) -> None:
        """Release HTTP clients owned by the service's components and the shared Redis client."""
        await self.crawler.close()
        close_search = getattr(self.search_provider, "close", None)
        if close_search is not None:
            await close_search()
        for client in {id(c): c for c in (self._decision_client, self._answer_client)}.values():
            close_client = getattr(client, "aclose", None)
            if close_client is not None:
                await close_client()
        await close_redis()


def create_research_service_from_env(config: Config | None = None) -> ResearchService:
    """
    Build a ResearchService from environment configuration.

    Raises:
        ValueError: If required API keys are missing
    """
    from api.openai_client import OpenAIOracleClient
    from db.engine import get_cache_store, get_rate_limit_store
    from tools.web.factory import create_crawler, create_search_provider

    config = config or Config()
    if not config.OPENAI_API_KEY:
        raise ValueError("OPENAI_API_KEY not found in environment variables")

    oracle = OpenAIOracleClient(
        api_key=config.OPENAI_API_KEY,
        model_name=config.DECISION_MODEL,
        base_url=config.OPENAI_BASE_URL,
        timeout_s=config.ORACLE_TIMEOUT_S,
        max_retries=config.ORACLE_MAX_RETRIES,
    )

    service = ResearchService(
        decision_client=oracle,
        answer_client=oracle,
        search_provider=create_search_provider(config),
        crawler=create_crawler(config),
        cache_store=get_cache_store(config.REDIS_URL),
        rate_limit_store=get_rate_limit_store(config.REDIS_URL),
        rate_limit=RateLimitConfig(
            max_requests=config.RATE_LIMIT_MAX_REQUESTS,
            window_ms=config.RATE_LIMIT_WINDOW_MS,
            max_retries=config.RATE_LIMIT_MAX_RETRIES,
            key_prefix=config.RATE_LIMIT_KEY_PREFIX,
        ),
        max_steps=config.MAX_STEPS,
        search_result_count=config.SEARCH_RESULTS_COUNT,
        cache_ttl_seconds=config.CACHE_TTL_SECONDS,
        decision_model=config.DECISION_MODEL,
        answer_model=config.ANSWER_MODEL,
    )
    logger.info(f"Research service initialized ({config.get_model_info()})")
    return service
