"""Research endpoint: one question in, one cited answer out."""

import asyncio
import contextlib

from fastapi import APIRouter, Depends, Request

from orchestrator.core import ResearchService
from server.dependencies import get_research_service
from server.schemas.requests import ResearchRequest
from server.schemas.responses import ErrorResponseDTO, ResearchResponseDTO
from server.utils import watch_disconnect
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Research"])

ERROR_RESPONSES = {
    code: {"model": ErrorResponseDTO} for code in (408, 429, 502, 503)
}


@router.post("/research", response_model=ResearchResponseDTO, responses=ERROR_RESPONSES)
async def research(
    request: ResearchRequest,
    http_request: Request,
    service: ResearchService = Depends(get_research_service),
):
    """Run the search/scrape/answer loop for a question."""
    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(watch_disconnect(http_request, cancel_event))
    try:
        answer = await service.ask(
            request.question,
            max_steps=request.max_steps,
            cancel_event=cancel_event,
        )
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher

    logger.info(
        "Research request completed",
        extra={
            "extra_fields": {
                "request_id": answer.request_id,
                "state": answer.state,
                "steps": answer.steps,
                "sources": len(answer.sources),
            }
        },
    )
    return ResearchResponseDTO.from_research_answer(answer)
