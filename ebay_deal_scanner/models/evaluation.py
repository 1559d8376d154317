"""
LLM ranking result models.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class RankingEntry:
    """Score assigned by the LLM to one listing of a scored batch."""

    id: int
    score: float
    reasoning: str
    rank: Optional[int] = None

    def validate(self) -> bool:
        """Validate ranking entry data."""
        if not isinstance(self.id, int) or self.id < 0:
            raise ValueError("id must be a non-negative integer")

        if not isinstance(self.score, (int, float)):
            raise ValueError("score must be a number")

        if not (0 <= self.score <= 100):
            raise ValueError("score must be between 0 and 100")

        if not isinstance(self.reasoning, str):
            raise ValueError("reasoning must be a string")

        return True


@dataclass
class RankingParseResult:
    """Outcome of parsing a raw LLM ranking response."""

    rankings: List[RankingEntry] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True when the response parsed into the expected structure."""
        return self.error is None
