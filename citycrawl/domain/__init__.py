"""
Domain model exports.
"""

from citycrawl.domain.listing import (
    Listing,
    ScrapeJob,
    ScrapeRunReport,
    UnitResult,
)

__all__ = [
    "Listing",
    "ScrapeJob",
    "ScrapeRunReport",
    "UnitResult",
]
