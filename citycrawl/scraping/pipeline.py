"""
Per-unit scraping pipeline: pagination plus per-item detail enrichment.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from citycrawl.domain.listing import Listing
from citycrawl.schemas.listing import ListingPayload
from citycrawl.scraping.errors import (
    DetailStepError,
    NoListingsFoundError,
    PageRequestError,
    SessionTimeoutError,
)
from citycrawl.scraping.logging_utils import log_event
from citycrawl.scraping.policy import FailureAction, OperationKind, RetryDelayPolicy
from citycrawl.scraping.session.base import AutomationSession
from citycrawl.scraping.sources.base import ListingSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UnitPipeline:
    """
    Drives one unit through its search pages using a session it is handed.

    Pages and items are strictly sequential. A failed page is skipped and the
    next page is still attempted; a failed item is skipped and the next item
    is still attempted. Only an empty overall result fails the unit.
    """

    def __init__(self, *, source: ListingSource, policy: RetryDelayPolicy) -> None:
        self._source = source
        self._policy = policy

    async def process(
        self,
        session: AutomationSession,
        unit: str,
        *,
        max_pages: int,
        max_items_per_page: int,
    ) -> list[Listing]:
        if max_pages <= 0:
            raise NoListingsFoundError(f"no listings found (max_pages={max_pages})")

        collected: list[Listing] = []
        for page in range(1, max_pages + 1):
            if page > 1:
                await self._policy.pause(self._policy.inter_page_delay())

            log_event(
                logger,
                logging.INFO,
                "page_started",
                source=self._source.name,
                unit=unit,
                page=page,
                max_pages=max_pages,
            )
            try:
                item_count = await self._bounded(
                    self._request_page(session, unit, page, max_items_per_page),
                    OperationKind.PAGE,
                )
            except Exception as exc:
                action = self._policy.on_failure(OperationKind.PAGE)
                log_event(
                    logger,
                    logging.WARNING,
                    "page_failed",
                    source=self._source.name,
                    unit=unit,
                    page=page,
                    action=action.value,
                    error=str(exc),
                    error_kind=type(exc).__name__,
                )
                if action is not FailureAction.SKIP_PAGE:
                    raise
                continue

            page_listings = await self._enrich_page(session, unit, page, item_count)
            collected.extend(page_listings)
            log_event(
                logger,
                logging.INFO,
                "page_completed",
                unit=unit,
                page=page,
                listings=len(page_listings),
                running_total=len(collected),
            )

        if not collected:
            raise NoListingsFoundError("no listings found")
        return collected

    async def _enrich_page(
        self,
        session: AutomationSession,
        unit: str,
        page: int,
        item_count: int,
    ) -> list[Listing]:
        page_listings: list[Listing] = []
        search_location = await session.current_location()

        for item_index in range(item_count):
            log_event(
                logger,
                logging.DEBUG,
                "item_started",
                unit=unit,
                page=page,
                item=item_index + 1,
                items=item_count,
            )
            try:
                listing = await self._bounded(
                    self._enrich_item(session, item_index),
                    OperationKind.DETAIL,
                )
            except Exception as exc:
                action = self._policy.on_failure(OperationKind.DETAIL)
                log_event(
                    logger,
                    logging.WARNING,
                    "item_failed",
                    unit=unit,
                    page=page,
                    item=item_index + 1,
                    action=action.value,
                    error=str(exc),
                    error_kind=type(exc).__name__,
                )
                if action is not FailureAction.SKIP_ITEM:
                    raise
                await self._restore_search_page(session, unit, search_location)
                await self._policy.pause(self._policy.inter_item_delay())
                continue

            if listing.has_identity:
                page_listings.append(listing)
            else:
                log_event(
                    logger,
                    logging.DEBUG,
                    "item_dropped_without_identity",
                    unit=unit,
                    page=page,
                    item=item_index + 1,
                )
            await self._policy.pause(self._policy.inter_item_delay())

        return page_listings

    async def _request_page(
        self,
        session: AutomationSession,
        unit: str,
        page: int,
        max_items_per_page: int,
    ) -> int:
        ready_timeout = self._policy.operation_timeout(OperationKind.READY)
        if page == 1:
            url = self._source.search_url(unit)
            try:
                await session.navigate(url)
                await session.wait_until_ready(self._source.card_selector, ready_timeout)
            except Exception as exc:
                raise PageRequestError(f"navigate {url}: {exc}") from exc
        else:
            try:
                await session.wait_until_ready(self._source.next_page_selector, ready_timeout)
                await session.click(self._source.next_page_selector, ready_timeout)
                await session.wait_until_ready(self._source.card_container_selector, ready_timeout)
            except Exception as exc:
                raise PageRequestError(f"advance to page {page}: {exc}") from exc

        try:
            item_count = await self._bounded(
                self._source.count_items(session),
                OperationKind.EVALUATE,
            )
        except Exception as exc:
            raise PageRequestError(f"count listing cards on page {page}: {exc}") from exc
        if item_count <= 0:
            raise PageRequestError(
                f"zero listings extracted on page {page} (selectors may need updating)"
            )
        if max_items_per_page > 0:
            item_count = min(item_count, max_items_per_page)
        return item_count

    async def _enrich_item(self, session: AutomationSession, item_index: int) -> Listing:
        ready_timeout = self._policy.operation_timeout(OperationKind.READY)
        search_url = await session.current_location()

        click = await self._bounded(
            self._source.open_item(session, item_index),
            OperationKind.EVALUATE,
        )
        if not click.ok:
            raise DetailStepError(f"listing card not found at index {item_index}")

        current_url = await session.current_location()
        if not current_url or current_url == search_url:
            if not click.href:
                raise DetailStepError("click did not navigate and href is empty")
            await session.navigate(click.href)

        for selector in self._source.detail_ready_selectors:
            await session.wait_until_ready(selector, ready_timeout)

        raw = await self._bounded(self._source.extract_detail(session), OperationKind.EVALUATE)
        detail_url = await session.current_location()
        listing = ListingPayload.from_raw(raw, url=detail_url).to_listing()

        await session.navigate(search_url)
        await session.wait_until_ready(self._source.card_container_selector, ready_timeout)
        return listing

    async def _restore_search_page(
        self,
        session: AutomationSession,
        unit: str,
        search_location: str,
    ) -> None:
        if not search_location:
            return
        try:
            if await session.current_location() == search_location:
                return
            await self._bounded(self._return_to(session, search_location), OperationKind.PAGE)
        except Exception as exc:
            log_event(
                logger,
                logging.WARNING,
                "search_page_restore_failed",
                unit=unit,
                search_url=search_location,
                error=str(exc),
            )

    async def _return_to(self, session: AutomationSession, url: str) -> None:
        await session.navigate(url)
        await session.wait_until_ready(
            self._source.card_container_selector,
            self._policy.operation_timeout(OperationKind.READY),
        )

    async def _bounded(self, awaitable: Awaitable[T], kind: OperationKind) -> T:
        timeout = self._policy.operation_timeout(kind)
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise SessionTimeoutError(f"{kind.value} step exceeded {timeout:g}s") from exc
