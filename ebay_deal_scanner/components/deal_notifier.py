"""
Deal notification through the email webhook.

Confirmed deals are posted as JSON to a Google Apps Script web app, which
renders and sends the email. Delivery problems are reported as an
unsuccessful DeliveryResult; they never abort the scan.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..models.config import NotifierConfig
from ..models.deal import Deal
from ..models.delivery import DeliveryResult
from ..utils.logging import ScanLog, get_logger
from .listing_extractor import parse_price, parse_time_left


def discount_percent(price: Optional[float], expected_price: Optional[float]) -> int:
    """Rounded percentage below the expected price; 0 when either is unknown."""
    if not price or not expected_price:
        return 0
    return round((expected_price - price) / expected_price * 100)


def build_deal_payload(deal: Deal) -> Dict[str, Any]:
    """Serialize one deal for the webhook."""
    listing = deal.listing
    profile = deal.profile
    minutes_left = parse_time_left(listing.time_left)

    return {
        "title": listing.title,
        "price": listing.price,
        "aiScore": listing.ai_score,
        "searchName": profile.name,
        "condition": listing.condition,
        "isAuction": listing.is_auction,
        "bidCount": listing.bid_count,
        "timeLeft": listing.time_left,
        "shipping": listing.shipping,
        "location": listing.distance,
        "sellerRating": listing.seller_rating,
        "aiReasoning": listing.ai_reasoning,
        "description": listing.description,
        "img": listing.img,
        "link": listing.link,
        "isUrgent": minutes_left is not None
        and minutes_left <= profile.urgent_minutes,
        "discount": discount_percent(
            parse_price(listing.price), profile.expected_price
        ),
    }


class WebhookNotifier:
    """Posts confirmed deals to the notification webhook."""

    def __init__(
        self,
        config: NotifierConfig,
        scan_log: Optional[ScanLog] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize webhook notifier.

        Args:
            config: Webhook URL, recipient and retry settings
            scan_log: Run log receiving delivery lines
            session: HTTP session to use; one with transport retries is
                created if omitted
        """
        self.config = config
        self.logger = get_logger("deal.notifier", sink=scan_log)
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with retry configuration."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "POST"],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def send_deals(self, deals: List[Deal]) -> DeliveryResult:
        """
        Send every confirmed deal in a single webhook call.

        Returns:
            DeliveryResult; no request is made when ``deals`` is empty
        """
        if not deals:
            self.logger.info("No deals to send")
            return DeliveryResult(success=True, delivery_time=datetime.now())

        payload = {
            "deals": [build_deal_payload(deal) for deal in deals],
            "recipientEmail": self.config.recipient_email,
        }

        self.logger.info(f"📧 Sending {len(deals)} deal(s) to {self.config.recipient_email}")

        try:
            response = self.session.post(
                self.config.webhook_url, json=payload, timeout=self.config.timeout
            )
            response.raise_for_status()
            result = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            return self._failure(f"Webhook request failed: {e}")

        if not isinstance(result, dict) or not result.get("success"):
            error = result.get("error") if isinstance(result, dict) else None
            return self._failure(f"Webhook reported failure: {error or result}")

        self.logger.info("✅ Email sent successfully")
        delivery = DeliveryResult(
            success=True, delivery_time=datetime.now(), deals_sent=len(deals)
        )
        delivery.validate()
        return delivery

    def _failure(self, message: str) -> DeliveryResult:
        self.logger.error(f"❌ Email send failed: {message}")
        result = DeliveryResult(
            success=False, delivery_time=datetime.now(), error_message=message[:500]
        )
        result.validate()
        return result
