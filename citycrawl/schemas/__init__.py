from citycrawl.schemas.listing import ListingPayload, parse_number
from citycrawl.schemas.run_summary import ScrapeRunSummary, UnitSummary

__all__ = [
    "ListingPayload",
    "ScrapeRunSummary",
    "UnitSummary",
    "parse_number",
]
