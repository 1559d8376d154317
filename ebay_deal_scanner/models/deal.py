"""
Deal and scan result models for the eBay Deal Scanner.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .config import SearchProfile
from .listing import Listing


@dataclass(frozen=True)
class Deal:
    """A confirmed listing paired with the search profile that found it."""

    listing: Listing
    profile: SearchProfile


@dataclass
class ProfileOutcome:
    """Result of scanning a single search profile."""

    profile: SearchProfile
    succeeded: bool
    deals: List[Deal] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class ScanReport:
    """Aggregated result of one scan over every configured profile."""

    outcomes: List[ProfileOutcome] = field(default_factory=list)

    def add(self, outcome: ProfileOutcome) -> None:
        """Record the outcome of one profile."""
        self.outcomes.append(outcome)

    @property
    def profiles_attempted(self) -> int:
        return len(self.outcomes)

    @property
    def profiles_succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def profiles_failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.succeeded)

    @property
    def deals(self) -> List[Deal]:
        """Every confirmed deal across all profiles, in scan order."""
        return [deal for outcome in self.outcomes for deal in outcome.deals]

    @property
    def all_failed(self) -> bool:
        """True when every attempted profile failed."""
        return self.profiles_attempted > 0 and self.profiles_failed == (
            self.profiles_attempted
        )
