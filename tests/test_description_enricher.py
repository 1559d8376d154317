"""Unit tests for the DescriptionEnricher component."""

from unittest.mock import AsyncMock, Mock

import pytest

from ebay_deal_scanner.components.description_enricher import (
    DescriptionEnricher,
    clean_description,
)
from ebay_deal_scanner.utils.error_handling import FetchError


@pytest.fixture
def fetcher():
    fetcher = Mock()
    fetcher.fetch = AsyncMock()
    return fetcher


class TestCleanDescription:
    """Test cases for clean_description."""

    def test_collapses_whitespace(self):
        """Test whitespace normalization."""
        assert clean_description("  Great\n\n  guitar\t here ") == "Great guitar here"

    def test_truncates_at_disclaimer(self):
        """Test that text ends exactly before the seller disclaimer."""
        text = "Great guitar, minor wear. Seller assumes all responsibility for this listing."

        assert clean_description(text) == "Great guitar, minor wear."

    def test_strips_script_residue(self):
        """Test removal of comments, tracking assignments and trailing code."""
        text = "/* tracking */ Solid top guitar. $M_ebay = 123; window.x {a: 1"

        assert clean_description(text) == "Solid top guitar."

    def test_empty(self):
        """Test empty input."""
        assert clean_description("") == ""
        assert clean_description(None) == ""


class TestDescriptionEnricher:
    """Test cases for DescriptionEnricher."""

    @pytest.mark.asyncio
    async def test_description_frame(self, fetcher, sample_listing):
        """Test that the description frame is fetched and its body read."""
        fetcher.fetch.side_effect = [
            '<html><iframe id="desc_ifr" src="https://vi.vipr.ebaydesc.com/1"></iframe></html>',
            "<html><body><p>Maton EBG808, serviced last year.</p>"
            "<p>Seller assumes all responsibility.</p></body></html>",
        ]
        enricher = DescriptionEnricher(fetcher)

        description = await enricher.enrich(sample_listing)

        assert description == "Maton EBG808, serviced last year."
        assert fetcher.fetch.await_args_list[0].args == (sample_listing.link,)
        assert fetcher.fetch.await_args_list[1].args == ("https://vi.vipr.ebaydesc.com/1",)

    @pytest.mark.asyncio
    async def test_inline_fallback_order(self, fetcher, sample_listing):
        """Test that inline containers are tried in their configured order."""
        fetcher.fetch.return_value = (
            "<html><div class='vi-desc-main'>Main text</div>"
            "<div id='desc_div'>Desc div text</div></html>"
        )
        enricher = DescriptionEnricher(fetcher)

        assert await enricher.enrich(sample_listing) == "Desc div text"
        fetcher.fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_description(self, fetcher, sample_listing):
        """Test the placeholder when nothing can be extracted."""
        fetcher.fetch.return_value = "<html><body><p>Unrelated</p></body></html>"
        enricher = DescriptionEnricher(fetcher)

        assert await enricher.enrich(sample_listing) == "No description available"

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_error_text(
        self, fetcher, sample_listing, scan_log
    ):
        """Test that fetch failures are returned as text, never raised."""
        fetcher.fetch.side_effect = FetchError("ScraperAPI 500: Server Error")
        enricher = DescriptionEnricher(fetcher, scan_log=scan_log)

        description = await enricher.enrich(sample_listing)

        assert description == "Error fetching description: ScraperAPI 500: Server Error"
        assert scan_log.contains("Description fetch failed")
