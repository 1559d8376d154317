"""
Page fetching through the rendering scraper proxy.

This module fetches eBay pages via ScraperAPI, which renders JavaScript
server-side, pacing every request with a randomized delay and retrying
failures with a linearly growing backoff.
"""

from typing import Optional

import requests

from ..models.config import ScraperConfig
from ..utils.error_handling import FetchError, RetryConfig, RetryPolicy
from ..utils.logging import ScanLog, get_logger


class PageFetcher:
    """Fetches documents through the scraper proxy with retries."""

    def __init__(
        self,
        config: ScraperConfig,
        scan_log: Optional[ScanLog] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize page fetcher.

        Args:
            config: Scraper proxy settings (key, endpoint, timeout, pacing)
            scan_log: Run log receiving attempt and failure lines
            session: HTTP session to reuse; a new one is created if omitted
        """
        self.config = config
        self.logger = get_logger("page.fetcher", sink=scan_log)
        self.session = session or requests.Session()
        self.retry_policy = RetryPolicy(
            RetryConfig(
                max_attempts=config.max_attempts,
                backoff_step=config.backoff_step,
                pre_delay=config.pre_delay,
                pre_delay_jitter=config.pre_delay_jitter,
            ),
            logger=self.logger,
            label="Fetch",
            error_type=FetchError,
            retry_on=(FetchError, requests.exceptions.RequestException),
        )

    def _proxy_params(self, url: str) -> dict:
        params = {"api_key": self.config.api_key, "url": url}
        if self.config.render:
            params["render"] = "true"
        return params

    async def _fetch_once(self, url: str) -> str:
        response = self.session.get(
            self.config.endpoint,
            params=self._proxy_params(url),
            timeout=self.config.timeout,
        )

        if not response.ok:
            raise FetchError(f"ScraperAPI {response.status_code}: {response.reason}")

        return response.text

    async def fetch(self, url: str) -> str:
        """
        Fetch a page's rendered HTML.

        Args:
            url: Target page URL (not the proxy URL)

        Returns:
            Document text

        Raises:
            FetchError: If every attempt failed
        """
        self.logger.debug(f"Fetching {url}")
        return await self.retry_policy.run(lambda: self._fetch_once(url))
