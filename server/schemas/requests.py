"""Pydantic request models for FastAPI endpoints."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

MAX_STEPS_LIMIT = 25


class ResearchRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=4000)
    max_steps: Optional[int] = Field(None, ge=1, le=MAX_STEPS_LIMIT)

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("question must not be blank")
        return value
