"""
Listing data models for the eBay Deal Scanner.
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterable, List

if TYPE_CHECKING:
    from .evaluation import RankingEntry

# Value used when a field's selectors match nothing on the page
UNKNOWN = "N/A"


@dataclass(frozen=True)
class Listing:
    """A single search result extracted from an eBay results page."""

    title: str
    price: str
    condition: str
    shipping: str
    distance: str
    link: str
    img: str
    time_left: str = UNKNOWN
    bid_count: int = 0
    seller_rating: str = UNKNOWN
    is_auction: bool = False
    description: str = ""
    ai_score: float = 0
    ai_reasoning: str = ""
    scored_pass: int = 0

    def with_ranking(self, entry: "RankingEntry", scoring_pass: int) -> "Listing":
        """Return a copy carrying the score and reasoning of a scoring pass."""
        return replace(
            self,
            ai_score=entry.score,
            ai_reasoning=entry.reasoning,
            scored_pass=scoring_pass,
        )

    def with_description(self, description: str) -> "Listing":
        """Return a copy carrying the enriched item description."""
        return replace(self, description=description)

    def validate(self) -> bool:
        """Validate listing data."""
        if not self.title or self.title == UNKNOWN:
            raise ValueError("Listing title cannot be empty")

        if not self.price or self.price == UNKNOWN:
            raise ValueError("Listing price cannot be empty")

        if "itm/" not in self.link:
            raise ValueError(f"Listing link is not an item link: {self.link}")

        if not (0 <= self.ai_score <= 100):
            raise ValueError("AI score must be between 0 and 100")

        if self.bid_count < 0:
            raise ValueError("Bid count cannot be negative")

        return True


def apply_rankings(
    listings: List[Listing], rankings: Iterable["RankingEntry"], scoring_pass: int
) -> List[Listing]:
    """
    Merge one scoring pass onto a batch of listings.

    Rankings are matched by their index into ``listings``; identifiers that
    fall outside the batch are ignored. Listings without a ranking keep the
    score of the last pass that did rank them.
    """
    merged = list(listings)
    for entry in rankings:
        if 0 <= entry.id < len(merged):
            merged[entry.id] = merged[entry.id].with_ranking(entry, scoring_pass)
    return merged
