import httpx
import pytest

from db.cache_store import InMemoryCacheStore
from db.rate_limit_store import InMemoryRateLimitStore
from models.errors import RateLimitExceeded
from models.evidence import SearchHit
from orchestrator.core import ResearchService
from tools.web.crawler import BulkCrawler
from tools.web.rate_limiter import RateLimitConfig, RateLimiter

from fakes import ANSWER, FakeOracleClient, FakeSearchProvider, run, scrape, search


class NoSleep:
    def __init__(self):
        self.waits = []

    async def __call__(self, seconds):
        self.waits.append(seconds)


def _service(oracle, clock, *, handler=None, rate_limit=None, max_steps=10):
    fetched = []

    def default_handler(request: httpx.Request) -> httpx.Response:
        fetched.append(str(request.url))
        return httpx.Response(200, text=f"content of {request.url}", headers={"content-type": "text/plain"})

    crawler = BulkCrawler(client=httpx.AsyncClient(transport=httpx.MockTransport(handler or default_handler)))
    rate_store = InMemoryRateLimitStore(clock=clock)
    service = ResearchService(
        decision_client=oracle,
        answer_client=oracle,
        search_provider=FakeSearchProvider(
            {"capital of France": [SearchHit("France", "https://x.test/p", "Paris")]}
        ),
        crawler=crawler,
        cache_store=InMemoryCacheStore(clock=clock),
        rate_limit_store=rate_store,
        rate_limit=rate_limit
        or RateLimitConfig(max_requests=100, window_ms=20_000, max_retries=0, key_prefix="test"),
        max_steps=max_steps,
        rate_limiter=RateLimiter(rate_store, clock=clock, sleep=NoSleep()),
    )
    return service, fetched


def test_ask_runs_the_loop(clock):
    oracle = FakeOracleClient(
        actions=[search("capital of France"), scrape("https://x.test/p"), ANSWER],
        answer_text="[Paris](https://x.test/p)",
    )
    service, fetched = _service(oracle, clock)

    answer = run(service.ask("  What is the capital of France?  "))

    assert answer.question == "What is the capital of France?"
    assert answer.steps == 2
    assert answer.sources == ["https://x.test/p"]
    assert fetched == ["https://x.test/p"]


def test_scrapes_are_shared_across_runs_through_the_cache(clock):
    oracle = FakeOracleClient(
        actions=[scrape("https://x.test/p"), ANSWER, scrape("https://x.test/p"), ANSWER]
    )
    service, fetched = _service(oracle, clock)

    run(service.ask("first"))
    second = run(service.ask("second"))

    assert fetched == ["https://x.test/p"]
    assert "content of https://x.test/p" in oracle.text_calls[1]["prompt"]
    assert second.steps == 1


def test_each_run_gets_fresh_evidence(clock):
    oracle = FakeOracleClient(actions=[search("capital of France"), ANSWER, ANSWER])
    service, _ = _service(oracle, clock)

    run(service.ask("first"))
    second = run(service.ask("second"))

    assert second.steps == 0
    assert second.sources == []
    assert "No searches performed yet." in oracle.text_calls[1]["prompt"]


def test_max_steps_override(clock):
    oracle = FakeOracleClient(actions=[search("a"), search("b"), search("c")])
    service, _ = _service(oracle, clock)

    answer = run(service.ask("q", max_steps=1))
    assert answer.steps == 1
    assert answer.state == "budget_exhausted"


def test_rate_limit_rejects_second_run_in_window(clock):
    oracle = FakeOracleClient(actions=[ANSWER, ANSWER])
    config = RateLimitConfig(max_requests=1, window_ms=20_000, max_retries=0, key_prefix="research")
    service, _ = _service(oracle, clock, rate_limit=config)

    run(service.ask("first"))
    with pytest.raises(RateLimitExceeded):
        run(service.ask("second"))
    # The rejected run never reached the oracle
    assert len(oracle.object_calls) == 1


def test_blank_question_is_rejected(clock):
    service, _ = _service(FakeOracleClient(), clock)
    with pytest.raises(ValueError):
        run(service.ask("   "))


def test_zero_max_steps_is_rejected_not_defaulted(clock):
    oracle = FakeOracleClient(actions=[ANSWER])
    service, _ = _service(oracle, clock)

    with pytest.raises(ValueError):
        run(service.ask("q", max_steps=0))
    assert oracle.object_calls == []


def test_aclose_releases_oracle_clients(clock):
    class ClosingOracle(FakeOracleClient):
        closed = 0

        async def aclose(self):
            ClosingOracle.closed += 1

    oracle = ClosingOracle()
    service, _ = _service(oracle, clock)
    run(service.aclose())
    # Shared decision/answer client is closed once
    assert ClosingOracle.closed == 1
