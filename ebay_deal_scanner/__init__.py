"""
eBay Deal Scanner

Scans eBay search results for configured search profiles, ranks listings
by value and auction urgency with an LLM, enriches the strongest candidates
with their item descriptions and reports the confirmed "unicorn" deals.
"""

__version__ = "0.1.0"
__author__ = "eBay Deal Scanner Team"
