"""Shared utilities for FastAPI routes."""

import asyncio
import math

from fastapi import Request, status
from fastapi.responses import JSONResponse

from models.errors import (
    ActionValidationError,
    OracleError,
    ProviderError,
    RateLimitExceeded,
    ResearchError,
    RunCancelled,
    StoreUnavailable,
)
from server.schemas.responses import ErrorDTO, ErrorResponseDTO

DISCONNECT_POLL_INTERVAL_S = 0.5

# Most specific first; the first isinstance match wins
ERROR_STATUS = (
    (RateLimitExceeded, status.HTTP_429_TOO_MANY_REQUESTS),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ActionValidationError, status.HTTP_502_BAD_GATEWAY),
    (ProviderError, status.HTTP_502_BAD_GATEWAY),
    (OracleError, status.HTTP_502_BAD_GATEWAY),
    (RunCancelled, status.HTTP_408_REQUEST_TIMEOUT),
)


def status_for(exc: ResearchError) -> int:
    for exc_type, code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(exc: ResearchError) -> JSONResponse:
    """Render a ResearchError as the shared ErrorDTO body."""
    body = ErrorResponseDTO(
        error=ErrorDTO(
            code=exc.code,
            message=exc.message,
            retryable=exc.retryable,
            details=_json_safe(exc.details),
        )
    )
    headers = {}
    if isinstance(exc, RateLimitExceeded):
        headers["Retry-After"] = str(max(1, math.ceil(exc.retry_after_s)))
    return JSONResponse(status_code=status_for(exc), content=body.model_dump(), headers=headers)


def _json_safe(details: dict) -> dict:
    # Raw oracle output can be anything; keep the body serializable
    return {k: v if isinstance(v, (str, int, float, bool, list, dict, type(None))) else repr(v)
            for k, v in details.items()}


async def watch_disconnect(request: Request, cancel_event: asyncio.Event) -> None:
    """Set ``cancel_event`` once the client goes away."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL_S)
