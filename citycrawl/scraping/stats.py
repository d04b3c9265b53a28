"""
In-memory summary statistics over scrape results.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from citycrawl.domain.listing import Listing, UnitResult


@dataclass(frozen=True)
class UnitCount:
    unit: str
    count: int


@dataclass(frozen=True)
class SummaryStats:
    """
    Aggregate statistics across every successful unit.
    """

    total_listings: int = 0
    average_price: float = 0.0
    minimum_price: float = 0.0
    maximum_price: float = 0.0
    most_expensive: Listing | None = None
    listings_per_unit: list[UnitCount] = field(default_factory=list)
    top_rated: list[Listing] = field(default_factory=list)


def build_summary_stats(
    results: Sequence[UnitResult],
    *,
    top_rated_limit: int = 5,
) -> SummaryStats:
    listings: list[Listing] = []
    unit_counts: Counter[str] = Counter()

    for result in results:
        if not result.succeeded:
            continue
        unit = result.unit.strip() or "Unknown"
        for listing in result.records:
            listings.append(listing)
            unit_counts[unit] += 1

    if not listings:
        return SummaryStats()

    prices = [listing.price for listing in listings]
    # First listing wins ties for most expensive.
    most_expensive = listings[0]
    for listing in listings[1:]:
        if listing.price > most_expensive.price:
            most_expensive = listing

    per_unit = sorted(
        (UnitCount(unit=unit, count=count) for unit, count in unit_counts.items()),
        key=lambda item: (-item.count, item.unit),
    )
    top_rated = sorted(listings, key=lambda item: (-item.rating, -item.price))

    return SummaryStats(
        total_listings=len(listings),
        average_price=sum(prices) / len(prices),
        minimum_price=min(prices),
        maximum_price=max(prices),
        most_expensive=most_expensive,
        listings_per_unit=per_unit,
        top_rated=top_rated[: max(0, top_rated_limit)],
    )
