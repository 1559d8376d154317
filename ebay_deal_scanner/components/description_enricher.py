"""
Item description enrichment.

Fetches a listing's detail page and extracts the seller's description,
either from the separately hosted description frame or from one of the
inline description containers.
"""

import re
from typing import List, Optional

from bs4 import BeautifulSoup

from ..models.listing import Listing
from ..utils.logging import ScanLog, get_logger
from .page_fetcher import PageFetcher

DESCRIPTION_FRAME_SELECTOR = "#desc_ifr"

INLINE_DESCRIPTION_SELECTORS: List[str] = [
    "#ds_div",
    "#desc_div",
    ".itemAttr",
    ".vi-desc-main",
    ".description__text",
]

NO_DESCRIPTION = "No description available"
DISCLAIMER_MARKER = "Seller assumes"

# Script and style residue that leaks into the text of the description frame
NOISE_PATTERNS = [
    re.compile(r"/\*.*?\*/"),
    re.compile(r"\$M_[^=]+=.*"),
    re.compile(r"\{.*$"),
]


def clean_description(text: Optional[str]) -> str:
    """Normalize whitespace, drop script residue and the seller disclaimer."""
    if not text:
        return ""

    cleaned = re.sub(r"\s+", " ", text)
    for pattern in NOISE_PATTERNS:
        cleaned = pattern.sub("", cleaned)

    return cleaned.split(DISCLAIMER_MARKER)[0].strip()


class DescriptionEnricher:
    """Fetches full item descriptions for shortlisted listings."""

    def __init__(self, fetcher: PageFetcher, scan_log: Optional[ScanLog] = None):
        self.fetcher = fetcher
        self.logger = get_logger("description.enricher", sink=scan_log)

    async def enrich(self, listing: Listing) -> str:
        """
        Fetch the description of a listing.

        Never raises: failures are returned as an error string so that one
        broken detail page does not abort the scan.
        """
        self.logger.info(f"  Fetching description: {listing.title[:60]}")
        try:
            description = await self._fetch_description(listing.link)
        except Exception as e:
            self.logger.warning(f"  Description fetch failed: {e}")
            return f"Error fetching description: {e}"

        return description or NO_DESCRIPTION

    async def _fetch_description(self, link: str) -> str:
        page = BeautifulSoup(await self.fetcher.fetch(link), "html.parser")

        frame = page.select_one(DESCRIPTION_FRAME_SELECTOR)
        if frame is not None and frame.get("src"):
            frame_doc = BeautifulSoup(
                await self.fetcher.fetch(frame["src"]), "html.parser"
            )
            body = frame_doc.body or frame_doc
            return clean_description(body.get_text(" "))

        for selector in INLINE_DESCRIPTION_SELECTORS:
            element = page.select_one(selector)
            if element is not None:
                text = clean_description(element.get_text(" "))
                if text:
                    return text

        return ""
