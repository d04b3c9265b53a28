"""
citycrawl/services/city_scrape_service.py

Service wiring for a multi-city scrape run: configuration, orchestrator,
automation sessions and result sinks.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from citycrawl.domain.listing import ScrapeRunReport
from citycrawl.schemas.run_summary import ScrapeRunSummary, UnitSummary
from citycrawl.scraping.config import ScrapeSettings, get_scrape_settings, load_source_profile
from citycrawl.scraping.export import write_listings_csv, write_listings_json
from citycrawl.scraping.logging_utils import log_event
from citycrawl.scraping.orchestrator import ScrapeOrchestrator
from citycrawl.scraping.pipeline import UnitPipeline
from citycrawl.scraping.policy import RetryDelayPolicy
from citycrawl.scraping.session.base import SessionFactory
from citycrawl.scraping.session.playwright_session import PlaywrightSessionFactory
from citycrawl.scraping.sources import ListingSource, ProfiledListingSource
from citycrawl.scraping.stats import SummaryStats, build_summary_stats
from citycrawl.scraping.storage import SQLAlchemyListingStorage
from db.session import session_scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScrapeRunOutcome:
    report: ScrapeRunReport
    json_written: int
    csv_written: int
    persisted: int
    stats: SummaryStats

    def to_summary(self) -> ScrapeRunSummary:
        return ScrapeRunSummary(
            units=[
                UnitSummary(
                    unit=result.unit,
                    listings=len(result.records),
                    status="success" if result.succeeded else "failed",
                    error=result.error,
                    duration_seconds=max(0.0, result.duration_seconds),
                )
                for result in self.report.results
            ],
            total_listings=self.stats.total_listings,
            json_written=self.json_written,
            csv_written=self.csv_written,
            persisted=self.persisted,
            deadline_exceeded=self.report.deadline_exceeded,
            average_price=round(self.stats.average_price, 2),
            minimum_price=self.stats.minimum_price,
            maximum_price=self.stats.maximum_price,
        )


class CityScrapeService:
    """
    Runs the city scrape and hands the ordered results to every enabled sink.

    `source` and `session_factory` default to the configured selector profile
    and a Playwright browser; both can be injected.
    """

    def __init__(
        self,
        *,
        settings: ScrapeSettings | None = None,
        source: ListingSource | None = None,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self._settings = settings or get_scrape_settings()
        self._source = source
        self._session_factory = session_factory

    @property
    def settings(self) -> ScrapeSettings:
        return self._settings

    def run(self, *, units: Sequence[str] | None = None, **overrides: Any) -> ScrapeRunOutcome:
        return asyncio.run(self.run_async(units=units, **overrides))

    async def run_async(
        self,
        *,
        units: Sequence[str] | None = None,
        **overrides: Any,
    ) -> ScrapeRunOutcome:
        settings = self._settings.with_overrides(units=units, **overrides)
        pipeline = UnitPipeline(
            source=self._source or self._build_source(settings),
            policy=RetryDelayPolicy.from_settings(settings),
        )

        if self._session_factory is not None:
            report = await self._orchestrate(settings, pipeline, self._session_factory)
        else:
            async with PlaywrightSessionFactory(settings=settings) as factory:
                report = await self._orchestrate(settings, pipeline, factory)

        json_written = write_listings_json(settings.out_file, report)
        csv_written = 0
        if settings.csv_out_file:
            csv_written = write_listings_csv(settings.csv_out_file, report)
        persisted = self._persist(settings, report) if settings.persist else 0

        outcome = ScrapeRunOutcome(
            report=report,
            json_written=json_written,
            csv_written=csv_written,
            persisted=persisted,
            stats=build_summary_stats(report.results, top_rated_limit=settings.top_rated_limit),
        )
        log_summary(outcome)
        return outcome

    @staticmethod
    def _build_source(settings: ScrapeSettings) -> ListingSource:
        return ProfiledListingSource(profile=load_source_profile(profile_path=settings.profile_path))

    @staticmethod
    async def _orchestrate(
        settings: ScrapeSettings,
        pipeline: UnitPipeline,
        session_factory: SessionFactory,
    ) -> ScrapeRunReport:
        orchestrator = ScrapeOrchestrator(
            settings=settings,
            pipeline=pipeline,
            session_factory=session_factory,
        )
        return await orchestrator.run()

    @staticmethod
    def _persist(settings: ScrapeSettings, report: ScrapeRunReport) -> int:
        with session_scope() as session:
            storage = SQLAlchemyListingStorage(
                session=session,
                batch_size=settings.storage_batch_size,
            )
            return storage.store(report.results)


def log_summary(outcome: ScrapeRunOutcome) -> None:
    """
    Emit the per-unit and aggregate run summary as structured log events.
    """

    for result in outcome.report.results:
        if result.succeeded:
            log_event(
                logger,
                logging.INFO,
                "unit_summary",
                unit=result.unit,
                status="success",
                listings=len(result.records),
            )
        else:
            log_event(
                logger,
                logging.WARNING,
                "unit_summary",
                unit=result.unit,
                status="failed",
                error=result.error,
                error_kind=result.error_kind,
            )

    stats = outcome.stats
    log_event(
        logger,
        logging.INFO,
        "scrape_run_summary",
        total_listings=stats.total_listings,
        average_price=round(stats.average_price, 2),
        minimum_price=stats.minimum_price,
        maximum_price=stats.maximum_price,
        most_expensive=stats.most_expensive.title if stats.most_expensive else None,
        listings_per_unit={item.unit: item.count for item in stats.listings_per_unit},
        top_rated=[
            {"title": item.title, "rating": item.rating, "price": item.price}
            for item in stats.top_rated
        ],
        json_written=outcome.json_written,
        csv_written=outcome.csv_written,
        persisted=outcome.persisted,
        deadline_exceeded=outcome.report.deadline_exceeded,
    )


@lru_cache(maxsize=1)
def get_city_scrape_service() -> CityScrapeService:
    """
    Build and cache the city scrape service.
    """

    return CityScrapeService()
