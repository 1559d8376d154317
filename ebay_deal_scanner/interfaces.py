"""
Protocol interfaces for the eBay Deal Scanner.

This module defines the protocol interfaces that establish the boundaries
between pipeline stages and enable dependency injection in the orchestrator.
"""

from typing import List, Optional, Protocol

from .models.config import SearchProfile
from .models.evaluation import RankingEntry
from .models.listing import Listing


class IPageFetcher(Protocol):
    """Protocol for fetching rendered pages."""

    async def fetch(self, url: str) -> str:
        """Fetch a page's HTML, raising FetchError once retries run out."""
        ...


class IListingExtractor(Protocol):
    """Protocol for turning a results page into listings."""

    def extract(self, document: str) -> List[Listing]:
        """Extract valid listings in page order."""
        ...


class IValueScorer(Protocol):
    """Protocol for LLM-based listing scoring."""

    async def score(
        self,
        listings: List[Listing],
        search_term: str,
        expected_price: Optional[float],
        urgent_minutes: float,
        include_descriptions: bool = False,
    ) -> List[RankingEntry]:
        """Score a batch; entry ids index into ``listings``."""
        ...


class IDescriptionEnricher(Protocol):
    """Protocol for fetching full item descriptions."""

    async def enrich(self, listing: Listing) -> str:
        """Return the listing's description text; never raises."""
        ...


class IFilterEngine(Protocol):
    """Protocol for score-based filtering."""

    def select_top_candidates(
        self, listings: List[Listing], top_n: int
    ) -> List[Listing]:
        """Drop irrelevant listings and cap the rest at ``top_n``."""
        ...

    def shortlist_for_enrichment(
        self, top: List[Listing], profile: SearchProfile
    ) -> List[Listing]:
        """Choose the listings whose descriptions are fetched."""
        ...

    def confirm_deals(
        self, listings: List[Listing], profile: SearchProfile
    ) -> List[Listing]:
        """Keep listings meeting the profile's final threshold."""
        ...
