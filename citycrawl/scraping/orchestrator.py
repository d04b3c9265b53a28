"""
Concurrent multi-city scraping orchestrator.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from datetime import datetime, timezone

from citycrawl.domain.listing import ScrapeJob, ScrapeRunReport, UnitResult
from citycrawl.scraping.config.models import ScrapeSettings
from citycrawl.scraping.errors import RunCancelledError, ScrapeConfigurationError
from citycrawl.scraping.logging_utils import log_event
from citycrawl.scraping.pipeline import UnitPipeline
from citycrawl.scraping.session.base import SessionFactory

logger = logging.getLogger(__name__)


class ScrapeOrchestrator:
    """
    Runs units on a bounded worker pool and returns results in input order.

    Each job gets its own fresh session, released on every exit path. A
    failing unit is recorded in its own result and never stops the run; only
    the run deadline cancels in-flight work.
    """

    def __init__(
        self,
        *,
        settings: ScrapeSettings,
        pipeline: UnitPipeline,
        session_factory: SessionFactory,
    ) -> None:
        if settings.run_timeout_seconds <= 0:
            raise ScrapeConfigurationError("run_timeout_seconds must be positive.")
        self._settings = settings
        self._pipeline = pipeline
        self._session_factory = session_factory

    def pool_size_for(self, unit_count: int) -> int:
        return max(1, min(self._settings.pool_size, unit_count))

    def run_sync(self, units: Sequence[str] | None = None) -> ScrapeRunReport:
        return asyncio.run(self.run(units))

    async def run(self, units: Sequence[str] | None = None) -> ScrapeRunReport:
        selected = list(self._settings.units if units is None else units)
        started_at = datetime.now(timezone.utc)
        if not selected:
            return ScrapeRunReport(results=(), started_at=started_at)

        workers = self.pool_size_for(len(selected))
        queue: asyncio.Queue[ScrapeJob] = asyncio.Queue()
        for index, unit in enumerate(selected):
            queue.put_nowait(ScrapeJob(index=index, unit=unit))
        results: list[UnitResult | None] = [None] * len(selected)

        log_event(
            logger,
            logging.INFO,
            "scrape_run_started",
            units=selected,
            workers=workers,
            max_pages=self._settings.max_pages,
            max_items_per_page=self._settings.max_items_per_page,
        )

        tasks = [
            asyncio.create_task(
                self._worker(worker_id, queue, results),
                name=f"scrape-worker-{worker_id}",
            )
            for worker_id in range(workers)
        ]
        try:
            _, pending = await asyncio.wait(tasks, timeout=self._settings.run_timeout_seconds)
        except asyncio.CancelledError:
            # Caller cancelled the run; workers must still release their sessions.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        deadline_exceeded = bool(pending)
        if pending:
            log_event(
                logger,
                logging.ERROR,
                "scrape_run_deadline_exceeded",
                run_timeout_seconds=self._settings.run_timeout_seconds,
                workers_cancelled=len(pending),
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        ordered = tuple(
            result if result is not None else self._not_started(index, selected[index])
            for index, result in enumerate(results)
        )
        report = ScrapeRunReport(
            results=ordered,
            deadline_exceeded=deadline_exceeded,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )
        log_event(
            logger,
            logging.INFO,
            "scrape_run_completed",
            units=len(ordered),
            failed_units=len(report.failed_units()),
            listings=len(report.successful_listings()),
            deadline_exceeded=deadline_exceeded,
        )
        return report

    async def _worker(
        self,
        worker_id: int,
        queue: asyncio.Queue[ScrapeJob],
        results: list[UnitResult | None],
    ) -> None:
        while True:
            try:
                job = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                results[job.index] = await self._run_job(worker_id, job)
            except asyncio.CancelledError:
                results[job.index] = self._cancelled(
                    job, "unit cancelled: run deadline exceeded while in flight"
                )
                raise
            finally:
                queue.task_done()

    async def _run_job(self, worker_id: int, job: ScrapeJob) -> UnitResult:
        started = time.monotonic()
        log_event(
            logger,
            logging.INFO,
            "unit_started",
            unit=job.unit,
            index=job.index,
            worker=worker_id,
        )
        try:
            async with self._session_factory.session(unit=job.unit) as session:
                listings = await self._pipeline.process(
                    session,
                    job.unit,
                    max_pages=self._settings.max_pages,
                    max_items_per_page=self._settings.max_items_per_page,
                )
        except asyncio.CancelledError:
            log_event(
                logger,
                logging.WARNING,
                "unit_cancelled",
                unit=job.unit,
                index=job.index,
                worker=worker_id,
            )
            raise
        except Exception as exc:
            duration = time.monotonic() - started
            log_event(
                logger,
                logging.ERROR,
                "unit_failed",
                unit=job.unit,
                index=job.index,
                worker=worker_id,
                error=str(exc),
                error_kind=type(exc).__name__,
                duration_seconds=round(duration, 3),
            )
            return UnitResult(
                unit=job.unit,
                index=job.index,
                error=str(exc) or type(exc).__name__,
                error_kind=type(exc).__name__,
                duration_seconds=duration,
            )

        duration = time.monotonic() - started
        log_event(
            logger,
            logging.INFO,
            "unit_completed",
            unit=job.unit,
            index=job.index,
            worker=worker_id,
            listings=len(listings),
            duration_seconds=round(duration, 3),
        )
        return UnitResult(
            unit=job.unit,
            index=job.index,
            records=tuple(listings),
            duration_seconds=duration,
        )

    @staticmethod
    def _cancelled(job: ScrapeJob, message: str) -> UnitResult:
        return UnitResult(
            unit=job.unit,
            index=job.index,
            error=message,
            error_kind=RunCancelledError.__name__,
        )

    @classmethod
    def _not_started(cls, index: int, unit: str) -> UnitResult:
        return cls._cancelled(
            ScrapeJob(index=index, unit=unit),
            "unit never started: run deadline exceeded",
        )
