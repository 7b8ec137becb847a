"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from models.errors import ResearchError
from server.dependencies import close_research_service
from server.routes import health, research
from server.utils import error_response, status_for
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    required_keys = ["OPENAI_API_KEY"]
    missing = [k for k in required_keys if not os.getenv(k)]
    if missing:
        logger.warning(f"Missing environment variables: {missing}")

    yield

    logger.info("FastAPI server shutting down")
    await close_research_service()


async def research_error_handler(request: Request, exc: ResearchError):
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"Research request failed: {exc.message}",
        extra={"extra_fields": {"code": exc.code, "status": status_code, "path": request.url.path}},
    )
    return error_response(exc)


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="DeepSearch API",
        description="Iterative web research with cited answers",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ResearchError, research_error_handler)

    app.include_router(health.router)
    app.include_router(research.router)

    return app
