"""
Data models for the eBay Deal Scanner.

This module contains the data classes used throughout the application
for representing search profiles, listings, rankings and scan results.
"""

from .config import (
    Configuration,
    LLMProviderConfig,
    NotifierConfig,
    ScraperConfig,
    SearchProfile,
    SystemConfig,
)
from .deal import Deal, ProfileOutcome, ScanReport
from .delivery import DeliveryResult
from .evaluation import RankingEntry, RankingParseResult
from .listing import UNKNOWN, Listing, apply_rankings

__all__ = [
    "Configuration",
    "LLMProviderConfig",
    "NotifierConfig",
    "ScraperConfig",
    "SearchProfile",
    "SystemConfig",
    "Deal",
    "ProfileOutcome",
    "ScanReport",
    "DeliveryResult",
    "RankingEntry",
    "RankingParseResult",
    "Listing",
    "UNKNOWN",
    "apply_rankings",
]
