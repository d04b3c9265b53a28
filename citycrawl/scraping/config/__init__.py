"""
Config helpers for city listing scraping.
"""

from citycrawl.scraping.config.loader import get_scrape_settings, load_source_profile, split_units
from citycrawl.scraping.config.models import ScrapeSettings, SourceProfile

__all__ = [
    "ScrapeSettings",
    "SourceProfile",
    "get_scrape_settings",
    "load_source_profile",
    "split_units",
]
