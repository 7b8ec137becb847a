import asyncio

import pytest

from models.errors import ActionValidationError, ProviderError, RunCancelled
from models.evidence import SearchHit
from orchestrator.action_selector import ActionSelector
from orchestrator.answer_synthesizer import AnswerSynthesizer
from orchestrator.loop import LoopOrchestrator, LoopState

from fakes import ANSWER, FakeOracleClient, FakeScraper, FakeSearchProvider, run, scrape, search

PARIS_HIT = SearchHit(
    title="France facts", url="https://x.test/p", snippet="The capital of France is Paris."
)


def _loop(oracle, provider=None, scraper=None, max_steps=10):
    return LoopOrchestrator(
        selector=ActionSelector(oracle),
        synthesizer=AnswerSynthesizer(oracle),
        search_provider=provider or FakeSearchProvider(),
        scrape=scraper or FakeScraper(),
        max_steps=max_steps,
    )


def test_capital_of_france_scenario():
    oracle = FakeOracleClient(
        actions=[search("capital of France"), ANSWER],
        answer_text="The capital of France is [Paris](https://x.test/p).",
    )
    provider = FakeSearchProvider({"capital of France": [PARIS_HIT]})

    answer = run(_loop(oracle, provider).run("What is the capital of France?"))

    assert answer.steps == 1
    assert answer.state == "answered"
    assert "Paris" in answer.text
    assert "https://x.test/p" in answer.text
    assert answer.sources == ["https://x.test/p"]
    assert provider.calls == [("capital of France", 3)]
    # The answer oracle saw the exact URL from the search evidence
    assert "URL: https://x.test/p" in oracle.text_calls[0]["prompt"]
    assert "final attempt" not in oracle.text_calls[0]["system"]


def test_immediate_answer_uses_no_steps():
    oracle = FakeOracleClient(actions=[ANSWER])
    loop = _loop(oracle)

    answer = run(loop.run("hello?"))

    assert answer.steps == 0
    assert loop.state == LoopState.ANSWERING
    assert len(oracle.object_calls) == 1


def test_budget_exhaustion_forces_final_answer():
    oracle = FakeOracleClient(actions=[search(f"q{i}") for i in range(10)])
    provider = FakeSearchProvider()
    loop = _loop(oracle, provider, max_steps=3)

    answer = run(loop.run("unanswerable"))

    assert answer.steps == 3
    assert answer.state == "budget_exhausted"
    assert answer.is_final_attempt
    assert loop.state == LoopState.BUDGET_EXHAUSTED
    assert len(provider.calls) == 3
    assert len(oracle.object_calls) == 3
    assert len(oracle.text_calls) == 1
    assert "final attempt" in oracle.text_calls[0]["system"]


def test_steps_never_exceed_budget():
    oracle = FakeOracleClient(actions=[search("a"), scrape("https://a.test"), search("b")])
    answer = run(_loop(oracle, max_steps=2).run("q"))
    assert answer.steps == answer.max_steps == 2


def test_evidence_accumulates_between_decisions():
    oracle = FakeOracleClient(actions=[search("capital of France"), scrape("https://x.test/p"), ANSWER])
    provider = FakeSearchProvider({"capital of France": [PARIS_HIT]})
    scraper = FakeScraper(pages={"https://x.test/p": "Paris has been the capital since 508."})

    answer = run(_loop(oracle, provider, scraper).run("What is the capital of France?"))

    assert answer.steps == 2
    assert "No searches performed yet." in oracle.object_calls[0]["prompt"]
    assert 'Query: "capital of France"' in oracle.object_calls[1]["prompt"]
    assert "Paris has been the capital since 508." in oracle.object_calls[2]["prompt"]
    assert scraper.calls == [["https://x.test/p"]]


def test_scrape_timeout_is_evidence_not_an_error():
    oracle = FakeOracleClient(actions=[scrape("https://a.test", "https://b.test"), ANSWER])
    scraper = FakeScraper(pages={"https://a.test": "page a"}, errors={"https://b.test": "timeout"})

    answer = run(_loop(oracle, scraper=scraper).run("q"))

    assert answer.steps == 1
    assert answer.state == "answered"
    evidence = oracle.text_calls[0]["prompt"]
    assert "page a" in evidence
    assert "## Scrape: https://b.test [FAILED]" in evidence
    assert "Failed to scrape: timeout" in evidence
    assert answer.sources == ["https://a.test"]


def test_provider_error_aborts_run():
    oracle = FakeOracleClient(actions=[search("q")])
    provider = FakeSearchProvider(error=ProviderError("fake", "unreachable"))

    with pytest.raises(ProviderError):
        run(_loop(oracle, provider).run("q"))
    assert oracle.text_calls == []


def test_invalid_action_aborts_run():
    oracle = FakeOracleClient(actions=[{"type": "browse", "query": None, "urls": None}])
    with pytest.raises(ActionValidationError):
        run(_loop(oracle).run("q"))


def test_cancelled_run_raises_before_next_decision():
    async def scenario():
        cancel_event = asyncio.Event()
        cancel_event.set()
        oracle = FakeOracleClient(actions=[search("q")])
        await _loop(oracle).run("q", cancel_event=cancel_event)

    with pytest.raises(RunCancelled):
        run(scenario())


def test_cancellation_during_run_stops_the_loop():
    class CancellingProvider(FakeSearchProvider):
        def __init__(self, event):
            super().__init__()
            self.event = event

        async def search(self, query, result_count, cancel_event=None):
            self.event.set()
            return await super().search(query, result_count, cancel_event)

    async def scenario():
        cancel_event = asyncio.Event()
        oracle = FakeOracleClient(actions=[search("q"), search("r"), ANSWER])
        provider = CancellingProvider(cancel_event)
        with pytest.raises(RunCancelled) as exc:
            await _loop(oracle, provider).run("q", cancel_event=cancel_event)
        return exc.value, oracle

    error, oracle = run(scenario())
    assert error.details["steps"] == 1
    assert len(oracle.object_calls) == 1
