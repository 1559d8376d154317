"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the eBay Deal Scanner test suite.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from ebay_deal_scanner.models.config import (
    Configuration,
    LLMProviderConfig,
    NotifierConfig,
    ScraperConfig,
    SearchProfile,
    SystemConfig,
)
from ebay_deal_scanner.models.evaluation import RankingEntry
from ebay_deal_scanner.models.listing import Listing
from ebay_deal_scanner.utils.logging import ScanLog


def make_listing(index: int = 0, **overrides) -> Listing:
    """Build a valid listing; ``index`` keeps titles and links distinct."""
    values = dict(
        title=f"Maton EBG808 Acoustic Guitar #{index}",
        price="AU $850.00",
        condition="Pre-owned",
        shipping="Free postage",
        distance="Adelaide, SA",
        link=f"https://www.ebay.com.au/itm/{100000 + index}",
        img=f"https://i.ebayimg.com/images/g/{index}/s-l500.jpg",
    )
    values.update(overrides)
    return Listing(**values)


def result_item_html(
    title="Maton EBG808 Acoustic Guitar",
    price="AU $850.00",
    link="https://www.ebay.com.au/itm/123456789?hash=abc",
    extra="",
) -> str:
    """Markup of one search result container."""
    return f"""
    <li class="s-item">
      <a class="s-item__link" href="{link}">
        <div class="s-item__title"><span>{title}</span></div>
      </a>
      <span class="s-item__price">{price}</span>
      <span class="s-item__subtitle">Pre-owned</span>
      <span class="s-item__shipping">Free postage</span>
      <span class="s-item__location">from Adelaide, SA</span>
      <img src="https://i.ebayimg.com/images/g/abc/s-l140.jpg?set_id=1">
      {extra}
    </li>"""


def results_page(*items: str) -> str:
    return (
        "<html><body><ul class='srp-results'>" + "".join(items) + "</ul></body></html>"
    )


@pytest.fixture
def listing_factory():
    """Factory building listings: ``listing_factory(index, **overrides)``."""
    return make_listing


@pytest.fixture
def result_item():
    """Factory building the markup of one search result."""
    return result_item_html


@pytest.fixture
def page_builder():
    """Factory wrapping result items into a results page."""
    return results_page


@pytest.fixture
def scan_log():
    """Fresh scan log for one test run."""
    return ScanLog()


@pytest.fixture
def sample_profile():
    """Create a sample SearchProfile for testing."""
    return SearchProfile(
        name="Maton Guitar",
        term="Maton guitar",
        expected_price=1000,
        postcode="5000",
        distance="200",
        top_n=5,
        urgent_hours=4,
        unicorn_threshold=85,
    )


@pytest.fixture
def second_profile():
    """A second profile for multi-profile runs."""
    return SearchProfile(
        name="Caravan",
        term="Caravan",
        expected_price=8000,
        postcode="5000",
        distance="200",
        top_n=5,
        urgent_hours=6,
        unicorn_threshold=85,
    )


@pytest.fixture
def sample_listing():
    """Create a sample Listing for testing."""
    return make_listing(0)


@pytest.fixture
def sample_listings():
    """Ten listings in page order."""
    return [make_listing(i) for i in range(10)]


@pytest.fixture
def sample_rankings():
    """Rankings for a three-item batch."""
    return [
        RankingEntry(id=0, rank=1, score=95, reasoning="Well under market value"),
        RankingEntry(id=1, rank=3, score=10, reasoning="Not a guitar"),
        RankingEntry(id=2, rank=2, score=60, reasoning="Fair price"),
    ]


@pytest.fixture
def scraper_config():
    """Scraper settings with all delays disabled."""
    return ScraperConfig(
        api_key="test_scraper_key",
        pre_delay=0.0,
        pre_delay_jitter=0.0,
        backoff_step=0.0,
    )


@pytest.fixture
def llm_config():
    """Gemini provider settings with no backoff."""
    return LLMProviderConfig(
        provider="google",
        model="gemini-3-flash-preview",
        api_key="test_gemini_key",
        backoff_step=0.0,
    )


@pytest.fixture
def notifier_config():
    """Create sample NotifierConfig for testing."""
    return NotifierConfig(
        webhook_url="https://script.google.com/macros/s/test/exec",
        recipient_email="buyer@example.com",
    )


@pytest.fixture
def sample_configuration(
    scraper_config, llm_config, notifier_config, sample_profile, second_profile
):
    """Create a sample Configuration for testing."""
    return Configuration(
        scraper=scraper_config,
        llm_provider=llm_config,
        notifier=notifier_config,
        searches=[sample_profile, second_profile],
        system=SystemConfig(profile_delay=0.0),
    )


# Mock fixtures
@pytest.fixture
def mock_fetcher():
    """Fetcher double returning an empty page by default."""
    fetcher = Mock()
    fetcher.fetch = AsyncMock(return_value="<html></html>")
    return fetcher


@pytest.fixture
def mock_scorer():
    """Scorer double returning no rankings by default."""
    scorer = Mock()
    scorer.score = AsyncMock(return_value=[])
    return scorer


@pytest.fixture
def mock_enricher():
    """Enricher double returning a fixed description."""
    enricher = Mock()
    enricher.enrich = AsyncMock(return_value="Excellent condition, hard case included")
    return enricher


# Temporary directory fixtures
@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# Environment fixtures
@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    env_vars = {
        "SCRAPER_API_KEY": "test_scraper_key",
        "GEMINI_API_KEY": "test_gemini_key",
        "GOOGLE_SCRIPT_URL": "https://script.google.com/macros/s/test/exec",
        "RECIPIENT_EMAIL": "buyer@example.com",
    }

    # Store original values
    original_values = {}
    for key, value in env_vars.items():
        original_values[key] = os.environ.get(key)
        os.environ[key] = value

    yield env_vars

    # Restore original values
    for key, original_value in original_values.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Add unit marker to all tests by default
        if not any(
            marker.name in ["integration", "slow"] for marker in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)
