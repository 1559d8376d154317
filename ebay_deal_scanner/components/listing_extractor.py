"""
Listing extraction components for the eBay Deal Scanner.

This module converts a rendered eBay search results page into Listing
objects. Markup variants are handled by ordered selector tables: the first
selector that matches wins, and a field that matches nothing falls back to
a sentinel value instead of failing the whole listing.
"""

import re
from typing import Dict, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from ..models.listing import UNKNOWN, Listing
from ..utils.logging import ScanLog, get_logger

# Search result containers, one entry per historical markup variant
CONTAINER_SELECTORS: List[str] = [
    "ul.srp-results li.s-item",
    "ul.srp-results li.s-card",
    "li.s-item",
]

FIELD_SELECTORS: Dict[str, List[str]] = {
    "title": [".s-item__title", ".s-card__title"],
    "link": ['a[href*="itm/"]', "a.s-item__link"],
    "price": [".s-item__price", ".s-card__price"],
    "condition": [".s-item__subtitle", ".SECONDARY_INFO"],
    "shipping": [".s-item__shipping", '[class*="shipping"]'],
    "location": [".s-item__location"],
    "image": ['img[src*="ebayimg"]', 'img[data-src*="ebayimg"]'],
    "time_left": [".s-item__time-left", ".s-item__timeLeft"],
    "bids": [".s-item__bids", '[class*="bid"]'],
    "seller": [".s-item__seller-info"],
}

# Titles of promotional tiles mixed into the results
PLACEHOLDER_TITLE_PATTERNS = [
    r"shop on ebay",
]

ITEM_PATH = "itm/"
NO_LINK = "#"


# "AU $100.00 to AU $150.00"
PRICE_RANGE_PATTERN = re.compile(
    r"AU\s*\$?([\d,]+\.?\d*)\s*to\s*AU\s*\$?([\d,]+\.?\d*)", re.IGNORECASE
)
NUMBER_PATTERN = re.compile(r"\d[\d,]*(?:\.\d+)?")

TIME_COMPONENTS = [
    (re.compile(r"(\d+)\s*d", re.IGNORECASE), 24 * 60),
    (re.compile(r"(\d+)\s*h", re.IGNORECASE), 60),
    (re.compile(r"(\d+)\s*m", re.IGNORECASE), 1),
]


def parse_price(price_text: Optional[str]) -> Optional[float]:
    """
    Extract a numeric price from display text.

    Args:
        price_text: Text such as "AU $1,234.50" or "AU $10 to AU $20"

    Returns:
        The price (lower bound for ranges), or None if there is no number
    """
    if not price_text:
        return None

    range_match = PRICE_RANGE_PATTERN.search(price_text)
    if range_match:
        return float(range_match.group(1).replace(",", ""))

    match = NUMBER_PATTERN.search(price_text)
    if not match:
        return None
    return float(match.group(0).replace(",", ""))


def parse_time_left(time_text: Optional[str]) -> Optional[int]:
    """
    Convert an auction countdown such as "2d 3h 15m" to minutes.

    Returns:
        Total minutes, or None for missing, sentinel or unrecognised text
    """
    if not time_text or time_text.strip() == UNKNOWN:
        return None

    total = 0
    matched = False
    for pattern, minutes in TIME_COMPONENTS:
        match = pattern.search(time_text)
        if match:
            matched = True
            total += int(match.group(1)) * minutes

    return total if matched else None


def select_first(node: Tag, selectors: Sequence[str]) -> Optional[Tag]:
    """Return the first element matched by the first selector that matches."""
    for selector in selectors:
        element = node.select_one(selector)
        if element is not None:
            return element
    return None


def element_text(element: Optional[Tag]) -> str:
    """Visible text of an element with whitespace collapsed."""
    if element is None:
        return UNKNOWN
    text = re.sub(r"\s+", " ", element.get_text(" ")).strip()
    return text or UNKNOWN


class ListingExtractor:
    """Extracts listings from an eBay search results page."""

    BID_COUNT_PATTERN = re.compile(r"(\d+)\s*bid", re.IGNORECASE)
    SELLER_RATING_PATTERN = re.compile(r"([\d.]+)%")
    IMAGE_SIZE_PATTERN = re.compile(r"/s-l\d+")

    def __init__(
        self,
        scan_log: Optional[ScanLog] = None,
        container_selectors: Optional[List[str]] = None,
        field_selectors: Optional[Dict[str, List[str]]] = None,
    ):
        """
        Initialize listing extractor.

        Args:
            scan_log: Run log receiving extraction counts
            container_selectors: Override for the container selector chain
            field_selectors: Overrides merged over the field selector table
        """
        self.logger = get_logger("listing.extractor", sink=scan_log)
        self.container_selectors = container_selectors or CONTAINER_SELECTORS
        self.field_selectors = {**FIELD_SELECTORS, **(field_selectors or {})}
        self.placeholder_regexes = [
            re.compile(pattern, re.IGNORECASE)
            for pattern in PLACEHOLDER_TITLE_PATTERNS
        ]

    def find_containers(self, soup: BeautifulSoup) -> List[Tag]:
        """Try each container selector in turn; first non-empty result wins."""
        for selector in self.container_selectors:
            containers = soup.select(selector)
            if containers:
                self.logger.debug(
                    f"Matched {len(containers)} containers with '{selector}'"
                )
                return containers
        return []

    def extract(self, document: str) -> List[Listing]:
        """
        Parse a results page into listings, in page order.

        Containers that do not describe a real item are dropped; this method
        never raises on unexpected markup.
        """
        soup = BeautifulSoup(document or "", "html.parser")
        containers = self.find_containers(soup)
        self.logger.info(f"  Found {len(containers)} potential containers")

        listings = []
        for container in containers:
            listing = self._extract_listing(container)
            if listing is not None:
                listings.append(listing)

        self.logger.info(f"  Extracted {len(listings)} valid items")
        return listings

    def _field(self, container: Tag, name: str) -> Optional[Tag]:
        return select_first(container, self.field_selectors[name])

    def _extract_listing(self, container: Tag) -> Optional[Listing]:
        title = element_text(self._field(container, "title"))
        price = element_text(self._field(container, "price"))

        link_el = self._field(container, "link")
        link = link_el.get("href", NO_LINK) if link_el is not None else NO_LINK

        if not self._is_valid(title, price, link):
            return None

        time_el = self._field(container, "time_left")
        time_left = element_text(time_el)
        is_auction = time_el is not None

        bid_count = 0
        bid_el = self._field(container, "bids")
        if bid_el is not None:
            bid_text = element_text(bid_el)
            bid_match = self.BID_COUNT_PATTERN.search(bid_text)
            if bid_match:
                bid_count = int(bid_match.group(1))
            if "bid" in bid_text.lower():
                is_auction = True

        return Listing(
            title=title,
            price=price,
            condition=element_text(self._field(container, "condition")),
            shipping=element_text(self._field(container, "shipping")),
            distance=element_text(self._field(container, "location")),
            link=link,
            img=self._image_url(self._field(container, "image")),
            time_left=time_left,
            bid_count=bid_count,
            seller_rating=self._seller_rating(self._field(container, "seller")),
            is_auction=is_auction,
        )

    def _is_valid(self, title: str, price: str, link: str) -> bool:
        if title == UNKNOWN or price == UNKNOWN:
            return False
        if ITEM_PATH not in link:
            return False
        return not any(regex.search(title) for regex in self.placeholder_regexes)

    def _image_url(self, image_el: Optional[Tag]) -> str:
        if image_el is None:
            return ""
        src = image_el.get("src") or image_el.get("data-src") or ""
        if not src:
            return ""
        return self.IMAGE_SIZE_PATTERN.sub("/s-l500", src).split("?")[0]

    def _seller_rating(self, seller_el: Optional[Tag]) -> str:
        if seller_el is None:
            return UNKNOWN
        match = self.SELLER_RATING_PATTERN.search(seller_el.get_text())
        return f"{match.group(1)}%" if match else UNKNOWN
