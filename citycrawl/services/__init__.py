"""
citycrawl/services package marker.
"""

from citycrawl.services.city_scrape_service import (
    CityScrapeService,
    ScrapeRunOutcome,
    get_city_scrape_service,
    log_summary,
)

__all__ = [
    "CityScrapeService",
    "ScrapeRunOutcome",
    "get_city_scrape_service",
    "log_summary",
]
