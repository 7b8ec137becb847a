"""FastAPI dependencies for research service access."""

from orchestrator.core import ResearchService, create_research_service_from_env


def get_research_service() -> ResearchService:
    """Dependency to get the research service instance (singleton pattern)."""
    if not hasattr(get_research_service, "_instance"):
        get_research_service._instance = create_research_service_from_env()
    return get_research_service._instance


async def close_research_service() -> None:
    instance = getattr(get_research_service, "_instance", None)
    if instance is not None:
        await instance.aclose()
        del get_research_service._instance
