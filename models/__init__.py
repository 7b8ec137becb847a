"""
Models package: actions, evidence records, answers and the error taxonomy.
"""

from .action import ACTION_JSON_SCHEMA, Action, AnswerAction, ScrapeAction, SearchAction, parse_action
from .errors import (
    ActionValidationError,
    CacheUnavailable,
    FetchError,
    OracleError,
    ProviderError,
    RateLimitExceeded,
    ResearchError,
    RunCancelled,
    StepBudgetError,
    StoreUnavailable,
)
from .evidence import QueryRecord, ScrapeRecord, SearchHit
from .research_response import ResearchAnswer

__all__ = [
    "ACTION_JSON_SCHEMA",
    "Action",
    "ActionValidationError",
    "AnswerAction",
    "CacheUnavailable",
    "FetchError",
    "OracleError",
    "ProviderError",
    "QueryRecord",
    "RateLimitExceeded",
    "ResearchAnswer",
    "ResearchError",
    "RunCancelled",
    "ScrapeAction",
    "ScrapeRecord",
    "SearchAction",
    "SearchHit",
    "StepBudgetError",
    "StoreUnavailable",
    "parse_action",
]
