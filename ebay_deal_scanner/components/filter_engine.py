"""Filter engine for score thresholds, top-N caps and enrichment shortlists."""

import logging
from typing import List

from ..models.config import SearchProfile
from ..models.listing import Listing

logger = logging.getLogger(__name__)

# Pass-1 scores at or below this are treated as irrelevant
RELEVANCE_FLOOR = 20


def sort_by_score(listings: List[Listing]) -> List[Listing]:
    """Sort descending by score; ties keep their current order."""
    return sorted(listings, key=lambda listing: listing.ai_score, reverse=True)


class FilterEngine:
    """Applies a search profile's score thresholds to scored listings."""

    def __init__(self, min_score: float = RELEVANCE_FLOOR):
        self.min_score = min_score

    def select_top_candidates(self, listings: List[Listing], top_n: int) -> List[Listing]:
        """
        Keep listings scoring above the relevance floor, best first, at most
        ``top_n`` of them. Applying this twice gives the same result.
        """
        relevant = [listing for listing in listings if listing.ai_score > self.min_score]
        top = sort_by_score(relevant)[:top_n]
        logger.debug(
            f"Top candidates: {len(top)} of {len(listings)} "
            f"(floor {self.min_score}, cap {top_n})"
        )
        return top

    def shortlist_for_enrichment(
        self, top: List[Listing], profile: SearchProfile
    ) -> List[Listing]:
        """Listings worth a detail-page fetch."""
        if profile.enrich_all_top_n:
            return list(top)
        return [listing for listing in top if listing.ai_score >= profile.unicorn_threshold]

    def confirm_deals(
        self, listings: List[Listing], profile: SearchProfile
    ) -> List[Listing]:
        """Listings whose final score meets the profile's unicorn threshold."""
        return [listing for listing in listings if listing.ai_score >= profile.unicorn_threshold]
