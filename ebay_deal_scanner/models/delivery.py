"""
Notification delivery result models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class DeliveryResult:
    """Result of handing the confirmed deals to the notification webhook."""

    success: bool
    delivery_time: datetime
    deals_sent: int = 0
    error_message: Optional[str] = None

    def validate(self) -> bool:
        """Validate delivery result data."""
        if not isinstance(self.delivery_time, datetime):
            raise ValueError("delivery_time must be a datetime object")

        if self.deals_sent < 0:
            raise ValueError("deals_sent cannot be negative")

        if self.error_message is not None and len(self.error_message) > 500:
            raise ValueError("error_message too long (max 500 characters)")

        # A failed delivery must explain itself
        if not self.success and not self.error_message:
            raise ValueError("error_message should be provided when success is False")

        return True
