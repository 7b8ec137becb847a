"""Error taxonomy for research runs.

Each error carries a stable ``code`` so the HTTP layer and the logs can tell
"try later" failures apart from malformed oracle output.
"""

from typing import Any


class ResearchError(Exception):
    """Base class for failures surfaced by the research loop."""

    code = "research_error"
    retryable = False

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }


class ActionValidationError(ResearchError):
    """The decision oracle returned an action that violates the action schema."""

    code = "invalid_action"

    def __init__(self, message: str, *, raw: Any = None):
        super().__init__(message, details={"raw": raw} if raw is not None else None)
        self.raw = raw


class ProviderError(ResearchError):
    """The search provider was unreachable or returned an error."""

    code = "search_provider_error"
    retryable = True

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}", details={"provider": provider})
        self.provider = provider


class OracleError(ResearchError):
    """A language-model call failed at the transport level."""

    code = "oracle_error"
    retryable = True


class FetchError(ResearchError):
    """
    A single URL could not be fetched.

    ``kind`` is one of "timeout", "network", "status" or "cancelled". The crawler
    records these per URL; they never abort a batch.
    """

    code = "fetch_error"

    def __init__(self, url: str, kind: str, reason: str):
        super().__init__(reason, details={"url": url, "kind": kind})
        self.url = url
        self.kind = kind
        self.reason = reason


class StoreUnavailable(ResearchError):
    """A shared store (cache or rate-limit) could not be reached."""

    code = "store_unavailable"
    retryable = True


class CacheUnavailable(StoreUnavailable):
    """The cache store could not be reached."""

    code = "cache_unavailable"


class RateLimitExceeded(ResearchError):
    """Rate-limit checks still failed after the bounded retries."""

    code = "rate_limited"
    retryable = True

    def __init__(self, key_prefix: str, retry_after_s: float):
        super().__init__(
            f"Rate limit exceeded for '{key_prefix}'",
            details={"key_prefix": key_prefix, "retry_after_s": retry_after_s},
        )
        self.key_prefix = key_prefix
        self.retry_after_s = retry_after_s


class RunCancelled(ResearchError):
    """The caller's cancellation signal fired during a run."""

    code = "cancelled"


class StepBudgetError(RuntimeError):
    """increment_step() was called after the step budget was used up."""
