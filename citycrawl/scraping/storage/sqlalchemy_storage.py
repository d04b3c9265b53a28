"""
SQLAlchemy-backed storage implementation for scraped listings.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from citycrawl.domain.listing import UnitResult
from citycrawl.repositories.listing_repository import ListingRepository
from citycrawl.scraping.logging_utils import log_event
from citycrawl.scraping.storage.base import ListingStorage

logger = logging.getLogger(__name__)


class SQLAlchemyListingStorage(ListingStorage):
    """
    Upsert listings through the repository in a single transaction.
    """

    def __init__(self, *, session: Session, batch_size: int = 1000) -> None:
        self._session = session
        self._batch_size = max(1, batch_size)

    def store(self, results: Sequence[UnitResult]) -> int:
        successful = [result for result in results if result.succeeded and result.records]
        if not successful:
            return 0

        repository = ListingRepository(self._session)
        written = 0
        try:
            for result in successful:
                written += repository.upsert(
                    result.records,
                    city=result.unit,
                    batch_size=self._batch_size,
                )
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            log_event(logger, logging.ERROR, "listing_store_failed", error=str(exc))
            raise

        log_event(
            logger,
            logging.INFO,
            "listings_stored",
            units=len(successful),
            rows=written,
        )
        return written
