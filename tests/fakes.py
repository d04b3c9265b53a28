"""
tests/fakes.py

In-memory automation session and listing source fakes.

A FakeListingSource is scripted per unit: each page is either an exception
(the page fails) or a list of item outcomes, where an item outcome is a raw
field dict or an exception raised while reading the detail page.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, urlparse

from citycrawl.scraping.config.models import ScrapeSettings
from citycrawl.scraping.errors import SessionAcquisitionError
from citycrawl.scraping.pipeline import UnitPipeline
from citycrawl.scraping.policy import RetryDelayPolicy
from citycrawl.scraping.session.base import AutomationSession, SessionFactory
from citycrawl.scraping.sources.base import CardClickResult, ListingSource

SEARCH_HOST = "https://search.test"
DETAIL_HOST = "https://detail.test"
NEXT_SELECTOR = "a[aria-label='Next']"
CARD_SELECTOR = ".card"
CONTAINER_SELECTOR = ".results"


@dataclass
class UnitScript:
    pages: list[Any] = field(default_factory=list)
    item_delay: float = 0.0
    hanging_pages: frozenset[int] = frozenset()


def item(title: str, price: float = 100.0, rating: float = 4.5, **extra: Any) -> dict[str, Any]:
    return {"title": title, "price": str(price), "rating": str(rating), "location": "Somewhere", **extra}


class FakeSession(AutomationSession):
    def __init__(self, unit: str) -> None:
        self.unit = unit
        self.location = ""
        self.page = 0
        self.opened_index: int | None = None
        self.closed = False
        self.navigations: list[str] = []

    async def navigate(self, url: str) -> None:
        self.navigations.append(url)
        self.location = url
        if url.startswith(SEARCH_HOST):
            query = parse_qs(urlparse(url).query)
            self.page = int(query.get("page", ["1"])[0])

    async def wait_until_ready(self, selector: str, timeout: float) -> None:
        return None

    async def evaluate(self, script: str) -> Any:
        return None

    async def click(self, selector: str, timeout: float) -> None:
        if selector == NEXT_SELECTOR:
            self.page += 1
            base = self.location.split("?", 1)[0]
            self.location = f"{base}?page={self.page}"

    async def current_location(self) -> str:
        return self.location

    async def close(self) -> None:
        self.closed = True


class FakeSessionFactory(SessionFactory):
    def __init__(self, *, fail_for: set[str] | None = None) -> None:
        self.fail_for = fail_for or set()
        self.created: list[FakeSession] = []
        self.active = 0
        self.max_active = 0

    async def create(self, *, unit: str) -> AutomationSession:
        if unit in self.fail_for:
            raise SessionAcquisitionError(f"cannot start browser for {unit}")
        session = _TrackedSession(unit, self)
        self.created.append(session)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        return session

    @property
    def all_closed(self) -> bool:
        return all(session.closed for session in self.created)


class _TrackedSession(FakeSession):
    def __init__(self, unit: str, factory: FakeSessionFactory) -> None:
        super().__init__(unit)
        self._factory = factory

    async def close(self) -> None:
        if not self.closed:
            self._factory.active -= 1
        await super().close()


class FakeListingSource(ListingSource):
    name = "fake"

    def __init__(self, scripts: dict[str, UnitScript], *, detail_ready: tuple[str, ...] = ("h1",)) -> None:
        self.scripts = scripts
        self._detail_ready = detail_ready

    def search_url(self, unit: str) -> str:
        return f"{SEARCH_HOST}/{unit.replace(' ', '-')}"

    @property
    def card_selector(self) -> str:
        return CARD_SELECTOR

    @property
    def card_container_selector(self) -> str:
        return CONTAINER_SELECTOR

    @property
    def next_page_selector(self) -> str:
        return NEXT_SELECTOR

    @property
    def detail_ready_selectors(self) -> tuple[str, ...]:
        return self._detail_ready

    def _page(self, session: FakeSession) -> Any:
        pages = self.scripts[session.unit].pages
        if session.page < 1 or session.page > len(pages):
            return []
        return pages[session.page - 1]

    async def count_items(self, session: AutomationSession) -> int:
        if session.page in self.scripts[session.unit].hanging_pages:
            await asyncio.sleep(60)
        page = self._page(session)
        if isinstance(page, Exception):
            raise page
        return len(page)

    async def open_item(self, session: AutomationSession, index: int) -> CardClickResult:
        page = self._page(session)
        if isinstance(page, Exception) or index >= len(page):
            return CardClickResult(ok=False)
        session.opened_index = index
        unit_slug = session.unit.replace(" ", "-")
        return CardClickResult(ok=True, href=f"{DETAIL_HOST}/{unit_slug}/p{session.page}/i{index}")

    async def extract_detail(self, session: AutomationSession) -> dict[str, Any]:
        script = self.scripts[session.unit]
        if script.item_delay:
            await asyncio.sleep(script.item_delay)
        outcome = self._page(session)[session.opened_index]
        if isinstance(outcome, Exception):
            raise outcome
        return dict(outcome)


def zero_delay_policy(*, page_timeout: float = 5.0, detail_timeout: float = 5.0) -> RetryDelayPolicy:
    return RetryDelayPolicy(
        page_delay_range=(0.0, 0.0),
        item_delay_range=(0.0, 0.0),
        page_timeout_seconds=page_timeout,
        detail_timeout_seconds=detail_timeout,
        run_timeout_seconds=3600.0,
    )


class CountingPolicy(RetryDelayPolicy):
    """Zero-delay policy that records every pause it draws."""

    def __init__(self, *, page_timeout: float = 5.0, detail_timeout: float = 5.0) -> None:
        super().__init__(
            page_delay_range=(0.0, 0.0),
            item_delay_range=(0.0, 0.0),
            page_timeout_seconds=page_timeout,
            detail_timeout_seconds=detail_timeout,
            run_timeout_seconds=3600.0,
        )
        self.page_delays = 0
        self.item_delays = 0

    def inter_page_delay(self) -> float:
        self.page_delays += 1
        return super().inter_page_delay()

    def inter_item_delay(self) -> float:
        self.item_delays += 1
        return super().inter_item_delay()


def make_settings(units: tuple[str, ...] = (), **overrides: Any) -> ScrapeSettings:
    defaults: dict[str, Any] = {
        "pool_size": 3,
        "max_pages": 1,
        "max_items_per_page": 0,
        "run_timeout_seconds": 30.0,
        "page_timeout_seconds": 5.0,
        "detail_timeout_seconds": 5.0,
        "delay_min_seconds": 0.0,
        "delay_max_seconds": 0.0,
    }
    defaults.update(overrides)
    return ScrapeSettings(units=units, **defaults)


def build_pipeline(scripts: dict[str, UnitScript], policy: RetryDelayPolicy | None = None) -> UnitPipeline:
    return UnitPipeline(source=FakeListingSource(scripts), policy=policy or zero_delay_policy())
