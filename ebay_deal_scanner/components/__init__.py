"""
Core components for the eBay Deal Scanner.

This module contains the pipeline stages: page fetching, listing extraction,
LLM scoring, description enrichment, filtering and deal notification.
"""

from .deal_notifier import WebhookNotifier, build_deal_payload
from .description_enricher import DescriptionEnricher, clean_description
from .filter_engine import FilterEngine
from .listing_extractor import ListingExtractor, parse_price, parse_time_left
from .llm_clients import (
    APILLMClient,
    GeminiLLMClient,
    LLMProvider,
    LLMResponse,
    create_llm_client,
)
from .page_fetcher import PageFetcher
from .prompt_manager import PromptManager
from .value_scorer import ValueScorer, parse_rankings

__all__ = [
    "PageFetcher",
    "ListingExtractor",
    "parse_price",
    "parse_time_left",
    "ValueScorer",
    "parse_rankings",
    "PromptManager",
    "LLMProvider",
    "LLMResponse",
    "GeminiLLMClient",
    "APILLMClient",
    "create_llm_client",
    "DescriptionEnricher",
    "clean_description",
    "FilterEngine",
    "WebhookNotifier",
    "build_deal_payload",
]
