"""
Prompt management for LLM ranking templates.

This module builds the ranking prompt sent to the LLM. The built-in template
encodes the value and urgency policy; a custom template file can replace it
as long as it keeps the required placeholders.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

REQUIRED_PLACEHOLDERS = ["{search_term}", "{items_json}"]

OPTIONAL_PLACEHOLDERS = [
    "{expected_price}",
    "{urgent_minutes}",
    "{description_rules}",
]

DEFAULT_TEMPLATE = """You are an expert at finding underpriced eBay listings for "{search_term}".
Expected fair price: {expected_price}.

Rank every item below from best to worst deal and give each a score from 0 to 100.

RELEVANCE (most important):
- An item that is not actually a "{search_term}" (accessories, parts, wanted ads, unrelated products) must score below 30, whatever its price.

URGENCY:
- Auctions ending within {urgent_minutes} minutes with 0-2 bids: +20
- Auctions ending within 1-2x that window: +10
- Auctions near their end that already have many bids: -5

VALUE:
- Price well below the expected fair price raises the score; above it lowers it.
- Better condition, free or cheap shipping and a high seller rating are smaller bonuses.
{description_rules}
Items (JSON):
{items_json}

Respond with JSON only, in exactly this format:
{{"rankings": [{{"id": 0, "rank": 1, "score": 95, "reasoning": "one or two sentences"}}]}}
Include every item id exactly once."""

DESCRIPTION_RULES = """
DESCRIPTION CHECKS (descriptions are included for these items):
- "as-is", "for parts", "not working" or similar: -30
- Damage, cracks, dents or heavy wear mentioned: -20
- "needs work", "needs repair" or restoration required: -15
- Missing accessories, case or parts: -10
- Extra accessories, case or extras included: +10
- Recently serviced, set up or maintained: +5
"""


class PromptManager:
    """Manager for the ranking prompt template."""

    def __init__(self, template_path: Optional[str] = None):
        """
        Initialize prompt manager.

        Args:
            template_path: Optional custom template file; the built-in
                template is used when omitted
        """
        self.template_path = template_path
        self._template: Optional[str] = None

    @property
    def template(self) -> str:
        """The active template, loaded on first use."""
        if self._template is None:
            if self.template_path:
                self._template = self.load_template(self.template_path)
            else:
                self._template = DEFAULT_TEMPLATE
        return self._template

    def load_template(self, template_path: str) -> str:
        """Load and validate a prompt template from file."""
        full_path = Path(template_path)

        try:
            if not full_path.exists():
                raise FileNotFoundError(f"Prompt template not found: {full_path}")

            template_content = full_path.read_text(encoding="utf-8").strip()

            if not template_content:
                raise ValueError(f"Prompt template is empty: {full_path}")

            self.validate_template(template_content)
            logger.info(f"Loaded prompt template: {template_path}")
            return template_content

        except (OSError, ValueError) as e:
            logger.error(f"Failed to load prompt template {template_path}: {e}")
            raise RuntimeError(f"Failed to load prompt template: {e}") from e

    @staticmethod
    def validate_template(template: str) -> None:
        """Validate that template contains required placeholders."""
        missing_required = [p for p in REQUIRED_PLACEHOLDERS if p not in template]
        if missing_required:
            raise ValueError(
                f"Template missing required placeholders: {missing_required}"
            )

        missing_optional = [p for p in OPTIONAL_PLACEHOLDERS if p not in template]
        if missing_optional:
            logger.info(f"Template missing optional placeholders: {missing_optional}")

    def build_ranking_prompt(
        self,
        search_term: str,
        items_json: str,
        expected_price: Optional[float],
        urgent_minutes: float,
        include_descriptions: bool,
    ) -> str:
        """
        Render the ranking prompt for one batch.

        Args:
            search_term: The profile's search term
            items_json: Serialized item payload
            expected_price: Fair price for the item, if known
            urgent_minutes: Urgency window in minutes
            include_descriptions: Whether description red flags apply

        Returns:
            Prompt text
        """
        values: Dict[str, str] = {
            "search_term": search_term,
            "items_json": items_json,
            "expected_price": (
                f"AU ${expected_price:,.0f}" if expected_price else "unknown"
            ),
            "urgent_minutes": f"{urgent_minutes:g}",
            "description_rules": DESCRIPTION_RULES if include_descriptions else "",
        }
        return self.template.format(**values)
