"""
Bulk web crawler for the research loop.

Fetches a batch of URLs concurrently and reports one outcome per URL. A
failure on one URL (timeout, network error, non-2xx status, cancellation)
never affects the others, and failed fetches are not retried here.
"""

import asyncio
import re
from collections.abc import Sequence

import httpx
from bs4 import BeautifulSoup

from models.errors import FetchError
from utils.cancellation import Cancelled, run_cancellable
from utils.logger import get_logger

from .contracts import CrawlOutcome, CrawlResult

logger = get_logger(__name__)

# Elements that never carry article text
_BOILERPLATE_TAGS = ["script", "style", "noscript", "nav", "header", "footer", "aside", "form", "svg"]
_TEXT_CONTENT_TYPES = ("text/plain", "text/markdown", "application/json", "application/xml", "text/xml")


def extract_text(html: str) -> str:
    """Reduce an HTML document to readable text."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_BOILERPLATE_TAGS):
        tag.decompose()

    root = soup.find("main") or soup.find("article") or soup.body or soup
    title = soup.title.get_text(strip=True) if soup.title else ""
    text = root.get_text(separator="\n", strip=True)
    text = re.sub(r"\n{3,}", "\n\n", text)

    if title and not text.startswith(title):
        return f"{title}\n\n{text}"
    return text


class BulkCrawler:
    """
    Concurrent URL fetcher with a bounded worker pool.

    Features:
    - At most ``max_concurrency`` fetches in flight per crawl
    - Per-fetch timeout, reported as the error "timeout"
    - Shared cancellation event aborting in-flight fetches
    - HTML to text extraction with boilerplate removal
    """

    USER_AGENT = "Mozilla/5.0 (compatible; DeepResearchBot/1.0)"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 15.0,
        max_concurrency: int = 5,
        max_content_chars: int = 20000,
    ):
        """
        Initialize the crawler.

        Args:
            client: HTTP client to use; one is created (and owned) when omitted
            timeout_s: Timeout for each URL fetch in seconds
            max_concurrency: Upper bound on simultaneous fetches
            max_content_chars: Extracted text is truncated to this length
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(timeout_s),
            headers={"User-Agent": self.USER_AGENT},
        )
        self.timeout_s = timeout_s
        self.max_concurrency = max_concurrency
        self.max_content_chars = max_content_chars

    async def crawl(
        self,
        urls: Sequence[str],
        cancel_event: asyncio.Event | None = None,
    ) -> CrawlResult:
        """
        Fetch every URL and partition the outcomes.

        Args:
            urls: Non-empty ordered sequence of URLs
            cancel_event: Optional shared signal; once set, unfinished fetches end
                with the error "cancelled"

        Returns:
            CrawlResult whose ``per_url`` follows the order of ``urls``
        """
        if not urls:
            raise ValueError("crawl() needs at least one URL")

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def crawl_with_limit(url: str) -> CrawlOutcome:
            async with semaphore:
                return await self._crawl_one(url, cancel_event)

        outcomes = await asyncio.gather(*(crawl_with_limit(url) for url in urls))
        result = CrawlResult(per_url=list(outcomes))

        logger.info(
            "Bulk crawl finished",
            extra={
                "extra_fields": {
                    "urls": len(urls),
                    "failed": len(result.failures),
                    "overall_success": result.overall_success,
                }
            },
        )
        return result

    async def _crawl_one(self, url: str, cancel_event: asyncio.Event | None) -> CrawlOutcome:
        if cancel_event is not None and cancel_event.is_set():
            return CrawlOutcome(url=url, ok=False, error="cancelled")

        try:
            content = await run_cancellable(
                asyncio.wait_for(self._fetch(url), timeout=self.timeout_s), cancel_event
            )
        except Cancelled:
            return CrawlOutcome(url=url, ok=False, error="cancelled")
        except asyncio.TimeoutError:
            logger.warning(f"Fetch timed out after {self.timeout_s}s: {url}")
            return CrawlOutcome(url=url, ok=False, error="timeout")
        except FetchError as e:
            logger.warning(
                f"Fetch failed: {url}",
                extra={"extra_fields": {"url": url, "kind": e.kind, "reason": e.reason}},
            )
            return CrawlOutcome(url=url, ok=False, error=e.reason)

        return CrawlOutcome(url=url, ok=True, content=content)

    async def _fetch(self, url: str) -> str:
        """
        Fetch one URL and return its text.

        Raises:
            FetchError: kind "timeout", "network" or "status". Malformed URLs and
                undecodable bodies count as "network"
        """
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as e:
            raise FetchError(url, "timeout", "timeout") from e
        except httpx.HTTPError as e:
            raise FetchError(url, "network", f"network error: {e}") from e
        except httpx.InvalidURL as e:
            raise FetchError(url, "network", f"invalid url: {e}") from e

        if not response.is_success:
            raise FetchError(url, "status", f"HTTP {response.status_code}")

        content_type = response.headers.get("content-type", "").lower()
        is_html = "html" in content_type or not content_type
        if not is_html and not content_type.startswith(_TEXT_CONTENT_TYPES):
            raise FetchError(url, "status", f"unsupported content type: {content_type}")

        try:
            if is_html:
                text = extract_text(response.text)
            else:
                text = response.text.strip()
        except (UnicodeError, ValueError) as e:
            raise FetchError(url, "network", f"unreadable content: {e}") from e

        if len(text) > self.max_content_chars:
            text = text[: self.max_content_chars] + "... [truncated]"
        return text

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
