"""
Search orchestration for the eBay Deal Scanner.

This module runs the scan pipeline for each configured search profile,
strictly one profile at a time: fetch the results page, extract listings,
score them, enrich the shortlist with descriptions, re-score, and keep the
listings that clear the profile's unicorn threshold.
"""

import asyncio
from typing import List, Optional
from urllib.parse import urlencode

from .components.deal_notifier import WebhookNotifier
from .components.description_enricher import DescriptionEnricher
from .components.filter_engine import FilterEngine, sort_by_score
from .components.listing_extractor import ListingExtractor
from .components.llm_clients import create_llm_client
from .components.page_fetcher import PageFetcher
from .components.prompt_manager import PromptManager
from .components.value_scorer import ValueScorer
from .interfaces import (
    IDescriptionEnricher,
    IFilterEngine,
    IListingExtractor,
    IPageFetcher,
    IValueScorer,
)
from .models.config import Configuration, SearchProfile
from .models.deal import Deal, ProfileOutcome, ScanReport
from .models.listing import Listing, apply_rankings
from .utils.error_handling import ErrorSeverity, ErrorTracker, categorize_exception
from .utils.logging import ScanLog, get_logger

DISCOVERY_PASS = 1
ENRICHED_PASS = 2


def build_search_url(profile: SearchProfile, base_url: str = "https://www.ebay.com.au") -> str:
    """Build the results page URL for a profile, nearest listings first."""
    params = [
        ("_from", "R40"),
        ("_nkw", profile.term),
        ("_sadis", profile.distance),
        ("_stpos", profile.postcode),
        ("_fspt", "1"),
        ("LH_PrefLoc", "99"),
        ("rt", "nc"),
    ]
    if profile.auction_only:
        params.append(("LH_Auction", "1"))
    return f"{base_url.rstrip('/')}/sch/i.html?{urlencode(params)}"


class SearchOrchestrator:
    """
    Runs the discovery and scoring pipeline over a list of search profiles.

    A failure inside one profile is logged and counted; the remaining
    profiles still run.
    """

    def __init__(
        self,
        fetcher: IPageFetcher,
        extractor: IListingExtractor,
        scorer: IValueScorer,
        enricher: IDescriptionEnricher,
        filter_engine: Optional[IFilterEngine] = None,
        scan_log: Optional[ScanLog] = None,
        profile_delay: float = 5.0,
        search_base_url: str = "https://www.ebay.com.au",
        error_tracker: Optional[ErrorTracker] = None,
    ):
        self.fetcher = fetcher
        self.extractor = extractor
        self.scorer = scorer
        self.enricher = enricher
        self.filter_engine = filter_engine or FilterEngine()
        self.profile_delay = profile_delay
        self.search_base_url = search_base_url
        self.error_tracker = error_tracker or ErrorTracker()
        self.logger = get_logger("orchestrator", sink=scan_log)

    async def scan_profile(self, profile: SearchProfile) -> List[Deal]:
        """
        Run the full pipeline for one profile.

        Raises:
            FetchError: If the results page could not be fetched
            OracleError: If the LLM could not be reached
        """
        self.logger.info(f'🔍 Searching for "{profile.name}"...')

        url = build_search_url(profile, self.search_base_url)
        self.logger.info(f"  URL: {url}")

        document = await self.fetcher.fetch(url)
        listings = self.extractor.extract(document)
        if not listings:
            self.logger.info("  No listings found")
            return []

        top = await self._discovery_pass(profile, listings)
        shortlist = self.filter_engine.shortlist_for_enrichment(top, profile)
        if not shortlist:
            self.logger.info(
                f"  No items scored {profile.unicorn_threshold:g}+ "
                "in the first pass, skipping descriptions"
            )
            return []

        confirmed = await self._enriched_pass(profile, shortlist)
        for listing in confirmed:
            self.logger.info(
                f"  🦄 {listing.title[:60]} - {listing.price} "
                f"(score {listing.ai_score:g})"
            )
        return [Deal(listing=listing, profile=profile) for listing in confirmed]

    async def _discovery_pass(
        self, profile: SearchProfile, listings: List[Listing]
    ) -> List[Listing]:
        rankings = await self.scorer.score(
            listings,
            search_term=profile.term,
            expected_price=profile.expected_price,
            urgent_minutes=profile.urgent_minutes,
            include_descriptions=False,
        )
        scored = apply_rankings(listings, rankings, DISCOVERY_PASS)
        top = self.filter_engine.select_top_candidates(scored, profile.top_n)
        self.logger.info(f"  {len(top)} items in the top {profile.top_n} after scoring")
        return top

    async def _enriched_pass(
        self, profile: SearchProfile, shortlist: List[Listing]
    ) -> List[Listing]:
        self.logger.info(f"  Fetching descriptions for {len(shortlist)} item(s)")

        enriched = []
        for listing in shortlist:
            description = await self.enricher.enrich(listing)
            enriched.append(listing.with_description(description))

        rankings = await self.scorer.score(
            enriched,
            search_term=profile.term,
            expected_price=profile.expected_price,
            urgent_minutes=profile.urgent_minutes,
            include_descriptions=True,
        )
        if not rankings:
            self.logger.warning(
                "  No rankings from the description pass, keeping first-pass scores"
            )

        rescored = sort_by_score(apply_rankings(enriched, rankings, ENRICHED_PASS))
        return self.filter_engine.confirm_deals(rescored, profile)

    async def run(self, profiles: List[SearchProfile]) -> ScanReport:
        """Scan every profile in order and collect the outcomes."""
        report = ScanReport()

        for index, profile in enumerate(profiles):
            try:
                deals = await self.scan_profile(profile)
            except Exception as e:
                self.logger.error(f'❌ Error searching for "{profile.name}": {e}')
                self.error_tracker.record_error(
                    component="orchestrator",
                    category=categorize_exception(e),
                    severity=ErrorSeverity.HIGH,
                    message=str(e),
                    exception=e,
                    context={"profile": profile.name},
                )
                report.add(ProfileOutcome(profile=profile, succeeded=False, error=str(e)))
            else:
                if deals:
                    self.logger.info(
                        f'  🦄 {len(deals)} CONFIRMED UNICORN(S) for "{profile.name}"!'
                    )
                else:
                    self.logger.info(f'  No unicorns found for "{profile.name}"')
                report.add(ProfileOutcome(profile=profile, succeeded=True, deals=deals))

            if index < len(profiles) - 1 and self.profile_delay > 0:
                self.logger.info(
                    f"  Waiting {self.profile_delay:g} seconds before next search..."
                )
                await asyncio.sleep(self.profile_delay)

        self._log_summary(report)
        return report

    def _log_summary(self, report: ScanReport) -> None:
        total = report.profiles_attempted
        self.logger.info("📊 SCAN SUMMARY:")
        self.logger.info(f"Successful searches: {report.profiles_succeeded}/{total}")
        self.logger.info(f"Failed searches: {report.profiles_failed}/{total}")
        self.logger.info(f"Unicorn deals found: {len(report.deals)}")


def build_orchestrator(
    config: Configuration, scan_log: Optional[ScanLog] = None
) -> SearchOrchestrator:
    """Wire the production components from configuration."""
    fetcher = PageFetcher(config.scraper, scan_log=scan_log)
    scorer = ValueScorer(
        create_llm_client(config.llm_provider),
        config.llm_provider,
        scan_log=scan_log,
        prompt_manager=PromptManager(config.system.prompt_template),
    )

    return SearchOrchestrator(
        fetcher=fetcher,
        extractor=ListingExtractor(scan_log=scan_log),
        scorer=scorer,
        enricher=DescriptionEnricher(fetcher, scan_log=scan_log),
        filter_engine=FilterEngine(),
        scan_log=scan_log,
        profile_delay=config.system.profile_delay,
        search_base_url=config.system.search_base_url,
    )


def build_notifier(
    config: Configuration, scan_log: Optional[ScanLog] = None
) -> WebhookNotifier:
    """Create the deal notifier from configuration."""
    return WebhookNotifier(config.notifier, scan_log=scan_log)
