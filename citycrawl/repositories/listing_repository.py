"""
citycrawl/repositories/listing_repository.py

Persistence layer for scraped listings.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from citycrawl.domain.listing import Listing
from db.models.listing import ScrapedListing

_DEFAULT_BATCH_SIZE = 1000
_UPDATABLE_COLUMNS = ("city", "title", "price", "location", "rating", "description")


class ListingRepository:
    """
    Repository for batch upserts of scraped listings.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(
        self,
        rows: Sequence[Listing],
        *,
        city: str,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert listings, or refresh the stored row when the URL already exists.

        Listings without a URL cannot be keyed and are skipped. Returns the
        number of rows sent to the database.
        """

        payloads: list[dict[str, Any]] = [
            {
                "city": city,
                "title": row.title,
                "price": row.price,
                "location": row.location,
                "rating": row.rating,
                "url": row.url.strip(),
                "description": row.description,
            }
            for row in rows
            if row.url.strip()
        ]
        if not payloads:
            return 0
        return self._upsert_payloads(payloads, batch_size=batch_size)

    def _upsert_payloads(
        self,
        payloads: Sequence[dict[str, Any]],
        *,
        batch_size: int,
    ) -> int:
        size = max(1, batch_size)
        deduped_payloads = self._deduplicate_payloads(payloads)
        written = 0

        for start in range(0, len(deduped_payloads), size):
            chunk = deduped_payloads[start : start + size]
            stmt = insert(ScrapedListing).values(chunk)
            stmt = stmt.on_conflict_do_update(
                index_elements=[ScrapedListing.url],
                set_={
                    **{column: stmt.excluded[column] for column in _UPDATABLE_COLUMNS},
                    "updated_at": func.now(),
                },
            )
            self._session.execute(stmt)
            written += len(chunk)

        return written

    def _deduplicate_payloads(
        self,
        payloads: Sequence[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        # Postgres rejects ON CONFLICT DO UPDATE touching the same row twice
        # in one statement; the last occurrence of a URL wins.
        by_url: dict[str, dict[str, Any]] = {}
        for payload in payloads:
            by_url.pop(payload["url"], None)
            by_url[payload["url"]] = payload
        return list(by_url.values())
