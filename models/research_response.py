from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

TerminalState = Literal["answered", "budget_exhausted"]


@dataclass(frozen=True)
class ResearchAnswer:
    request_id: str
    question: str
    text: str
    state: TerminalState
    steps: int
    max_steps: int
    sources: list[str] = field(default_factory=list)
    latency_ms: int = 0

    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )

    @property
    def is_final_attempt(self) -> bool:
        """True when the answer was forced by the step budget."""
        return self.state == "budget_exhausted"

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "question": self.question,
            "text": self.text if len(self.text) <= 200 else self.text[:200] + "...",
            "state": self.state,
            "steps": self.steps,
            "max_steps": self.max_steps,
            "sources": list(self.sources),
            "latency_ms": self.latency_ms,
            "timestamp": self.timestamp,
        }
