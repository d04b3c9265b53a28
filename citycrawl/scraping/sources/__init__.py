"""
Listing source exports.
"""

from citycrawl.scraping.sources.base import CardClickResult, ListingSource
from citycrawl.scraping.sources.profiled_source import ProfiledListingSource

__all__ = ["CardClickResult", "ListingSource", "ProfiledListingSource"]
