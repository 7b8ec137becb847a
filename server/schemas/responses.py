"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ErrorDTO(BaseModel):
    code: str
    message: str
    retryable: bool
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponseDTO(BaseModel):
    error: ErrorDTO


class ResearchResponseDTO(BaseModel):
    request_id: str
    question: str
    text: str
    state: Literal["answered", "budget_exhausted"]
    steps: int
    max_steps: int
    sources: list[str] = Field(default_factory=list)
    latency_ms: int
    timestamp: str

    @classmethod
    def from_research_answer(cls, answer):
        """Convert ResearchAnswer to DTO."""
        return cls(
            request_id=answer.request_id,
            question=answer.question,
            text=answer.text,
            state=answer.state,
            steps=answer.steps,
            max_steps=answer.max_steps,
            sources=list(answer.sources),
            latency_ms=answer.latency_ms,
            timestamp=answer.timestamp,
        )


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str = "1.0.0"
