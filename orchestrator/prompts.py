"""Fixed instructions for the decision and generation oracles."""

from datetime import datetime, timezone

CITATION_RULES = """When providing answers:
1. ALWAYS include clickable links to your sources using markdown format: [text](url)
2. For each fact or recommendation you mention, include a link to the source where you found that information
3. Use the exact URLs from the search and scrape results you receive; never shorten or paraphrase them
4. Make the linked text descriptive (e.g., "according to TripAdvisor" or "as reported by Food & Wine")

Never provide information without including the source links from your evidence."""


def current_date_line(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"CURRENT DATE AND TIME: {now.date().isoformat()} ({now.strftime('%A, %B %d, %Y')} UTC)"


def decision_system_prompt(now: datetime | None = None) -> str:
    return f"""You are a research assistant that can search the web, scrape URLs, or answer questions.

Your goal is to help answer the user's question by choosing the next best action. You have three actions:
1. 'search' - Search the web for information relevant to the user's question. Set "query"; "urls" must be null.
2. 'scrape' - Get the full content of URLs found in search results. Set "urls" to a non-empty list; "query" must be null.
3. 'answer' - Provide a final answer when you have enough information. "query" and "urls" must be null.

{current_date_line(now)}

When users ask for "up to date", "current", "latest" or "recent" information, take the current date into account in your queries."""


def decision_prompt(question: str, evidence: str) -> str:
    return f"""User's question: "{question}"

Based on this context, choose the next action:
1. If you need more information to answer the user's question, use 'search' with a relevant query
2. If you have URLs from search results that need to be scraped for full content, use 'scrape' with those URLs
3. If you have enough information to answer the user's question, use 'answer'

Here is the context from previous actions:

{evidence}"""


def answer_system_prompt(is_final: bool, now: datetime | None = None) -> str:
    if is_final:
        effort = (
            "IMPORTANT: This is your final attempt to answer the question. You may not have all the "
            "information you need, but you must make your best effort to provide a helpful answer "
            "based on what you have gathered. Say which parts are uncertain."
        )
    else:
        effort = (
            "Provide a comprehensive answer based on the information you have gathered from web "
            "searches and scraping."
        )

    return f"""You are a research assistant that provides comprehensive answers based on web search and scraping results.

{current_date_line(now)}

{effort}

{CITATION_RULES}"""


def answer_prompt(question: str, evidence: str) -> str:
    return f"""User's question: "{question}"

Here is all the context I have gathered:

{evidence}

Please provide a comprehensive answer to the user's question based on this information."""
