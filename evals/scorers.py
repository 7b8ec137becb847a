"""Deterministic scorers for research answers. Each returns a score in [0, 1]."""

import re

MARKDOWN_LINK = re.compile(r"\[.*?\]\(.*?\)")


def contains_links(output: str) -> float:
    """1.0 if the answer carries at least one markdown link."""
    return 1.0 if MARKDOWN_LINK.search(output or "") else 0.0


def mentions_expected(output: str, expected: str) -> float:
    """
    1.0 if the expected answer appears in the output, case-insensitively.

    Only meaningful for short expected answers (regression set); long reference
    answers almost never appear verbatim.
    """
    if not expected:
        return 0.0
    return 1.0 if expected.strip().lower() in (output or "").lower() else 0.0


SCORERS = {
    "contains_links": lambda output, expected: contains_links(output),
    "mentions_expected": mentions_expected,
}
