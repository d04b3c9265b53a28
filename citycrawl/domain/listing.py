"""
citycrawl/domain/listing.py

Domain models for multi-city listing scraping runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class ScrapeJob:
    """
    One unit (a city) paired with its original input position.

    Consumed by exactly one worker; carries no mutable shared state.
    """

    index: int
    unit: str


@dataclass(frozen=True)
class Listing:
    """
    One enriched listing scraped from a detail page.
    """

    title: str = ""
    price: float = 0.0
    location: str = ""
    rating: float = 0.0
    url: str = ""
    description: str = ""

    @property
    def has_identity(self) -> bool:
        return bool(self.url.strip() or self.title.strip())


@dataclass(frozen=True)
class UnitResult:
    """
    Outcome for one unit. Failed units never carry records.
    """

    unit: str
    index: int
    records: tuple[Listing, ...] = ()
    error: str | None = None
    error_kind: str | None = None
    duration_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.error is not None and self.records:
            raise ValueError(
                f"UnitResult for unit='{self.unit}' carries both an error and records."
            )

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ScrapeRunReport:
    """
    Ordered results for one run, one entry per input unit.
    """

    results: tuple[UnitResult, ...]
    deadline_exceeded: bool = False
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def successful_listings(self) -> list[Listing]:
        listings: list[Listing] = []
        for result in self.results:
            if result.succeeded:
                listings.extend(result.records)
        return listings

    def failed_units(self) -> list[UnitResult]:
        return [result for result in self.results if not result.succeeded]
