from dataclasses import dataclass, field
from typing import Any, Union

from .errors import ActionValidationError

ACTION_TYPES = ("search", "scrape", "answer")


@dataclass(frozen=True)
class SearchAction:
    query: str
    type: str = field(default="search", init=False)


@dataclass(frozen=True)
class ScrapeAction:
    urls: tuple[str, ...]
    type: str = field(default="scrape", init=False)


@dataclass(frozen=True)
class AnswerAction:
    type: str = field(default="answer", init=False)


Action = Union[SearchAction, ScrapeAction, AnswerAction]


# Structured-output schema for the decision oracle. Every field is required and
# nullable so it can be used with strict JSON-schema decoding.
ACTION_JSON_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "type": {
            "type": "string",
            "enum": list(ACTION_TYPES),
            "description": (
                "The type of action to take. "
                "'search': search the web for more information. "
                "'scrape': fetch the full content of URLs. "
                "'answer': answer the user's question and complete the loop."
            ),
        },
        "query": {
            "type": ["string", "null"],
            "description": "The query to search for. Required if type is 'search', otherwise null.",
        },
        "urls": {
            "type": ["array", "null"],
            "items": {"type": "string"},
            "description": "The URLs to scrape. Required if type is 'scrape', otherwise null.",
        },
    },
    "required": ["type", "query", "urls"],
    "additionalProperties": False,
}


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, tuple)) and len(value) == 0:
        return False
    return True


def parse_action(raw: Any) -> Action:
    """
    Validate a decision-oracle object and turn it into an Action.

    Rules:
    - type must be one of search/scrape/answer (no defaulting)
    - search needs a non-empty query and no urls
    - scrape needs a non-empty list of non-empty URL strings and no query
    - answer carries no query and no urls
    - unknown keys are rejected

    Raises:
        ActionValidationError: on any violation
    """
    if not isinstance(raw, dict):
        raise ActionValidationError(
            f"Action must be an object, got {type(raw).__name__}", raw=raw
        )

    unknown = set(raw) - {"type", "query", "urls"}
    if unknown:
        raise ActionValidationError(f"Unknown action fields: {sorted(unknown)}", raw=raw)

    action_type = raw.get("type")
    query = raw.get("query")
    urls = raw.get("urls")

    if action_type == "search":
        if not isinstance(query, str) or not query.strip():
            raise ActionValidationError("search action requires a non-empty 'query'", raw=raw)
        if _is_present(urls):
            raise ActionValidationError("search action must not carry 'urls'", raw=raw)
        return SearchAction(query=query.strip())

    if action_type == "scrape":
        if not isinstance(urls, (list, tuple)) or not urls:
            raise ActionValidationError("scrape action requires a non-empty 'urls' list", raw=raw)
        if not all(isinstance(u, str) and u.strip() for u in urls):
            raise ActionValidationError("scrape 'urls' must be non-empty strings", raw=raw)
        if _is_present(query):
            raise ActionValidationError("scrape action must not carry 'query'", raw=raw)
        return ScrapeAction(urls=tuple(u.strip() for u in urls))

    if action_type == "answer":
        if _is_present(query) or _is_present(urls):
            raise ActionValidationError("answer action takes no 'query' or 'urls'", raw=raw)
        return AnswerAction()

    raise ActionValidationError(f"Unrecognized action type: {action_type!r}", raw=raw)
