"""
Value scoring components for the eBay Deal Scanner.

This module sends a batch of listings to the ranking LLM and turns its
answer into RankingEntry values. Oracle failures are retried and then
raised; malformed answers are reported as an empty ranking.
"""

import json
import re
from typing import Any, Dict, List, Optional

from ..models.config import LLMProviderConfig
from ..models.evaluation import RankingEntry, RankingParseResult
from ..models.listing import Listing
from ..utils.error_handling import OracleError, RetryConfig, RetryPolicy
from ..utils.logging import ScanLog, get_logger
from .listing_extractor import parse_price, parse_time_left
from .llm_clients import LLMProvider
from .prompt_manager import PromptManager

MAX_DESCRIPTION_CHARS = 1500
EXCERPT_CHARS = 200

FENCE_PATTERN = re.compile(r"```[\w-]*\s*(.*?)\s*```", re.DOTALL)


def build_items_payload(
    listings: List[Listing], include_descriptions: bool
) -> List[Dict[str, Any]]:
    """
    Build the per-listing payload sent to the LLM.

    Each item's ``id`` is its index in ``listings``.
    """
    items = []
    for index, listing in enumerate(listings):
        item: Dict[str, Any] = {
            "id": index,
            "title": listing.title,
            "price": listing.price,
            "price_numeric": parse_price(listing.price) or 0,
            "condition": listing.condition,
            "shipping": listing.shipping,
            "location": listing.distance,
            "is_auction": listing.is_auction,
            "time_left": listing.time_left,
            "time_left_minutes": parse_time_left(listing.time_left),
            "bid_count": listing.bid_count,
            "seller_rating": listing.seller_rating,
        }
        if include_descriptions and listing.description:
            item["description"] = listing.description[:MAX_DESCRIPTION_CHARS]
        items.append(item)
    return items


def _extract_json_text(text: str) -> str:
    fenced = FENCE_PATTERN.search(text)
    if fenced:
        return fenced.group(1)

    # Chatter around a bare JSON value
    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return text
    start = min(starts)
    end = max(text.rfind("}"), text.rfind("]"))
    return text[start : end + 1] if end > start else text[start:]


def _to_entry(raw: Any) -> Optional[RankingEntry]:
    if not isinstance(raw, dict):
        return None
    try:
        # Stacked bonuses can push the model past 100
        score = min(max(float(raw["score"]), 0.0), 100.0)
        entry = RankingEntry(
            id=int(raw["id"]),
            score=score,
            reasoning=str(raw.get("reasoning", "")),
            rank=int(raw["rank"]) if raw.get("rank") is not None else None,
        )
        entry.validate()
    except (KeyError, TypeError, ValueError):
        return None
    return entry


def parse_rankings(text: Optional[str]) -> RankingParseResult:
    """
    Parse a ranking response.

    Accepts ``{"rankings": [...]}`` or a bare array, optionally wrapped in a
    fenced code block or surrounded by prose. Entries without a usable id or
    score are skipped.
    """
    if not text or not text.strip():
        return RankingParseResult(error="Empty response")

    try:
        data = json.loads(_extract_json_text(text.strip()))
    except json.JSONDecodeError as e:
        return RankingParseResult(error=f"Invalid JSON: {e}")

    if isinstance(data, dict):
        raw_rankings = data.get("rankings")
    else:
        raw_rankings = data

    if not isinstance(raw_rankings, list):
        return RankingParseResult(error="Response has no rankings array")

    rankings = [entry for entry in map(_to_entry, raw_rankings) if entry is not None]
    return RankingParseResult(rankings=rankings)


class ValueScorer:
    """Scores listing batches with the ranking LLM."""

    def __init__(
        self,
        llm_client: LLMProvider,
        config: LLMProviderConfig,
        scan_log: Optional[ScanLog] = None,
        prompt_manager: Optional[PromptManager] = None,
    ):
        self.llm_client = llm_client
        self.logger = get_logger("value.scorer", sink=scan_log)
        self.prompt_manager = prompt_manager or PromptManager()
        self.retry_policy = RetryPolicy(
            RetryConfig(
                max_attempts=config.max_attempts,
                backoff_step=config.backoff_step,
            ),
            logger=self.logger,
            label="Gemini" if config.provider == "google" else "LLM",
            error_type=OracleError,
        )

    async def score(
        self,
        listings: List[Listing],
        search_term: str,
        expected_price: Optional[float],
        urgent_minutes: float,
        include_descriptions: bool = False,
    ) -> List[RankingEntry]:
        """
        Score a batch of listings.

        Args:
            listings: Batch to score; entry ids index into this list
            search_term: Profile search term
            expected_price: Fair price for the item, if known
            urgent_minutes: Urgency window in minutes
            include_descriptions: Send enriched descriptions with each item

        Returns:
            Ranking entries, empty if the response could not be parsed

        Raises:
            OracleError: If the LLM could not be reached after retries
        """
        if not listings:
            return []

        items = build_items_payload(listings, include_descriptions)
        prompt = self.prompt_manager.build_ranking_prompt(
            search_term=search_term,
            items_json=json.dumps(items, indent=2, ensure_ascii=False),
            expected_price=expected_price,
            urgent_minutes=urgent_minutes,
            include_descriptions=include_descriptions,
        )

        self.logger.info(
            f"  Scoring {len(listings)} items"
            f"{' with descriptions' if include_descriptions else ''}"
        )
        response = await self.retry_policy.run(
            lambda: self.llm_client.evaluate(prompt)
        )

        result = parse_rankings(response.content)
        if not result.ok:
            excerpt = response.content[:EXCERPT_CHARS]
            self.logger.error(
                f"  Could not parse rankings: {result.error}",
                extra={"excerpt": excerpt},
            )
            self.logger.info(f"  Response excerpt: {excerpt}")
            return []

        self.logger.info(f"  Received {len(result.rankings)} rankings")
        return result.rankings
