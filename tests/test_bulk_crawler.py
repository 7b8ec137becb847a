import asyncio

import httpx
import pytest

from tools.web.contracts import CrawlResult
from tools.web.crawler import BulkCrawler, extract_text

from fakes import run

HTML = """
<html>
  <head><title>Paris</title><script>var x = 1;</script></head>
  <body>
    <nav>Home | About</nav>
    <main><p>Paris is the capital of France.</p></main>
    <footer>Copyright</footer>
  </body>
</html>
"""


def _crawler(handler, **kwargs) -> BulkCrawler:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return BulkCrawler(client=client, **kwargs)


def test_extract_text_drops_boilerplate():
    text = extract_text(HTML)
    assert text.startswith("Paris")
    assert "Paris is the capital of France." in text
    assert "var x" not in text
    assert "Home | About" not in text
    assert "Copyright" not in text


def test_crawl_partial_failure_keeps_order():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "missing.test":
            return httpx.Response(404, text="not found")
        return httpx.Response(200, html=HTML)

    urls = ["https://ok.test/a", "https://missing.test/b", "https://ok.test/c"]
    result = run(_crawler(handler).crawl(urls))

    assert [o.url for o in result.per_url] == urls
    assert result.overall_success is False
    assert [o.ok for o in result.per_url] == [True, False, True]
    assert result.per_url[1].error == "HTTP 404"
    assert "Paris is the capital of France." in result.per_url[0].content


def test_crawl_timeout_does_not_affect_other_urls():
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "b.test":
            await asyncio.sleep(5)
        return httpx.Response(200, text="fast page", headers={"content-type": "text/plain"})

    result = run(_crawler(handler, timeout_s=0.05).crawl(["https://a.test", "https://b.test"]))

    assert result.per_url[0].ok is True
    assert result.per_url[0].content == "fast page"
    assert result.per_url[1].ok is False
    assert result.per_url[1].error == "timeout"
    assert result.overall_success is False


def test_crawl_network_error_is_reported_per_url():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = run(_crawler(handler).crawl(["https://down.test"]))
    assert result.per_url[0].error.startswith("network error")


def test_crawl_all_success():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    result = run(_crawler(handler).crawl(["https://api.test/1", "https://api.test/2"]))
    assert result.overall_success is True
    assert result.failures == []


def test_crawl_truncates_long_content():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="x" * 500, headers={"content-type": "text/plain"})

    result = run(_crawler(handler, max_content_chars=100).crawl(["https://long.test"]))
    assert result.per_url[0].content == "x" * 100 + "... [truncated]"


def test_crawl_rejects_binary_content():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"%PDF", headers={"content-type": "application/pdf"})

    result = run(_crawler(handler).crawl(["https://doc.test/file.pdf"]))
    assert result.per_url[0].ok is False
    assert "unsupported content type" in result.per_url[0].error


def test_crawl_respects_concurrency_limit():
    in_flight = 0
    peak = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return httpx.Response(200, text="ok", headers={"content-type": "text/plain"})

    urls = [f"https://many.test/{i}" for i in range(6)]
    result = run(_crawler(handler, max_concurrency=2).crawl(urls))

    assert result.overall_success is True
    assert peak <= 2


def test_crawl_cancellation_marks_unfinished_urls():
    async def scenario() -> CrawlResult:
        cancel_event = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "slow.test":
                cancel_event.set()
                await asyncio.sleep(5)
            return httpx.Response(200, text="done", headers={"content-type": "text/plain"})

        crawler = _crawler(handler, timeout_s=10, max_concurrency=1)
        return await crawler.crawl(
            ["https://fast.test", "https://slow.test", "https://later.test"],
            cancel_event=cancel_event,
        )

    result = run(scenario())
    assert result.per_url[0].ok is True
    assert result.per_url[1].error == "cancelled"
    assert result.per_url[2].error == "cancelled"


def test_crawl_requires_urls():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200)

    with pytest.raises(ValueError):
        run(_crawler(handler).crawl([]))


def test_crawl_result_serialization_preserves_outcomes():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/bad":
            return httpx.Response(500)
        return httpx.Response(200, text="body", headers={"content-type": "text/plain"})

    result = run(_crawler(handler).crawl(["https://s.test/good", "https://s.test/bad"]))
    data = result.to_dict()

    assert data["overall_success"] is False
    assert CrawlResult.from_dict(data) == result


def test_crawl_malformed_url_is_reported_per_url():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="page a", headers={"content-type": "text/plain"})

    urls = ["https://a.test", "https://exa mple.com/\x00bad"]
    result = run(_crawler(handler).crawl(urls))

    assert [o.url for o in result.per_url] == urls
    assert result.per_url[0].ok is True
    assert result.per_url[0].content == "page a"
    assert result.per_url[1].ok is False
    assert result.per_url[1].error.startswith("invalid url")


def test_owned_client_uses_configured_timeout():
    crawler = BulkCrawler(timeout_s=30)
    try:
        assert crawler._client.timeout == httpx.Timeout(30)
    finally:
        run(crawler.close())
