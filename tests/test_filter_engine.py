"""Unit tests for the FilterEngine component."""

from dataclasses import replace

from ebay_deal_scanner.components.filter_engine import FilterEngine, sort_by_score


def scored(listing_factory, scores):
    return [listing_factory(i, ai_score=score) for i, score in enumerate(scores)]


class TestFilterEngine:
    """Test cases for FilterEngine."""

    def test_select_top_candidates(self, listing_factory):
        """Test the relevance floor, descending order and top-N cap."""
        listings = scored(listing_factory, [95, 10, 60, 20, 21, 88, 40, 5, 70, 33])

        top = FilterEngine().select_top_candidates(listings, top_n=5)

        assert [listing.ai_score for listing in top] == [95, 88, 70, 60, 40]

    def test_floor_is_exclusive(self, listing_factory):
        """Test that a score of exactly 20 is dropped."""
        listings = scored(listing_factory, [20, 20.5])

        top = FilterEngine().select_top_candidates(listings, top_n=5)

        assert [listing.ai_score for listing in top] == [20.5]

    def test_select_top_candidates_idempotent(self, listing_factory):
        """Test that filtering twice gives the same result."""
        engine = FilterEngine()
        listings = scored(listing_factory, [50, 90, 15, 90, 70, 30, 25])

        once = engine.select_top_candidates(listings, top_n=4)
        twice = engine.select_top_candidates(once, top_n=4)

        assert twice == once

    def test_ties_keep_page_order(self, listing_factory):
        """Test that equal scores keep their original order."""
        listings = scored(listing_factory, [50, 80, 80, 80])

        top = FilterEngine().select_top_candidates(listings, top_n=3)

        assert [listing.title for listing in top] == [
            listings[1].title,
            listings[2].title,
            listings[3].title,
        ]

    def test_shortlist_threshold_gated(self, listing_factory, sample_profile):
        """Test that only unicorn-threshold listings are shortlisted."""
        top = scored(listing_factory, [95, 85, 84.9, 60])

        shortlist = FilterEngine().shortlist_for_enrichment(top, sample_profile)

        assert [listing.ai_score for listing in shortlist] == [95, 85]

    def test_shortlist_enrich_all(self, listing_factory, sample_profile):
        """Test the enrich-all strategy shortlists the whole top N."""
        profile = replace(sample_profile, enrich_all_top_n=True)
        top = scored(listing_factory, [95, 60, 30])

        shortlist = FilterEngine().shortlist_for_enrichment(top, profile)

        assert shortlist == top

    def test_confirm_deals(self, listing_factory, sample_profile):
        """Test the final unicorn threshold."""
        listings = scored(listing_factory, [91, 85, 70])

        deals = FilterEngine().confirm_deals(listings, sample_profile)

        assert [listing.ai_score for listing in deals] == [91, 85]

    def test_custom_floor(self, listing_factory):
        """Test a non-default relevance floor."""
        listings = scored(listing_factory, [45, 55])

        top = FilterEngine(min_score=50).select_top_candidates(listings, top_n=5)

        assert [listing.ai_score for listing in top] == [55]


def test_sort_by_score_descending(listing_factory):
    """Test sort_by_score ordering."""
    listings = scored(listing_factory, [10, 30, 20])

    assert [listing.ai_score for listing in sort_by_score(listings)] == [30, 20, 10]
