"""Render accumulated evidence as text for the decision and answer oracles."""

from collections.abc import Sequence

from models.evidence import QueryRecord, ScrapeRecord


def build_query_history(queries: Sequence[QueryRecord]) -> str:
    """
    Render search evidence. URLs are copied verbatim so answers can cite them.
    """
    if not queries:
        return "No searches performed yet."

    lines: list[str] = []
    for record in queries:
        lines.append(f'## Query: "{record.query}"')
        lines.append("")
        if not record.hits:
            lines.append("No results.")
            lines.append("")
        for hit in record.hits:
            lines.append(f"### {hit.date} - {hit.title}" if hit.date else f"### {hit.title}")
            lines.append(f"URL: {hit.url}")
            lines.append(hit.snippet)
            lines.append("")
    return "\n".join(lines).rstrip()


def build_scrape_history(scrapes: Sequence[ScrapeRecord]) -> str:
    if not scrapes:
        return "No pages scraped yet."

    lines: list[str] = []
    for record in scrapes:
        marker = " [FAILED]" if record.failed else ""
        lines.append(f"## Scrape: {record.url}{marker}")
        lines.append("")
        lines.append("<scrape_result>")
        lines.append(record.content)
        lines.append("</scrape_result>")
        lines.append("")
    return "\n".join(lines).rstrip()


def build_evidence_text(queries: Sequence[QueryRecord], scrapes: Sequence[ScrapeRecord]) -> str:
    """
    Build the evidence block shared by both oracles.

    Args:
        queries: Search records in insertion order
        scrapes: Scrape records in insertion order

    Returns:
        Deterministic text: the same records always render identically
    """
    return "\n\n".join(
        [
            "# Search history",
            build_query_history(queries),
            "# Scrape history",
            build_scrape_history(scrapes),
        ]
    )
