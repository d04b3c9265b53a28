"""
Listing source abstraction: the site-specific extraction capability.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from citycrawl.scraping.session.base import AutomationSession


@dataclass(frozen=True)
class CardClickResult:
    """
    Outcome of clicking the nth item card on a search page.
    """

    ok: bool
    href: str = ""


class ListingSource(ABC):
    """
    Knows where a unit's listings live and how to read them.

    The pipeline owns control flow; a source only answers site questions.
    """

    name: str = "listing-source"

    @abstractmethod
    def search_url(self, unit: str) -> str:
        """
        First search results page URL for a unit.
        """

    @property
    @abstractmethod
    def card_selector(self) -> str:
        """
        Selector matching one item card on a search page.
        """

    @property
    @abstractmethod
    def card_container_selector(self) -> str:
        """
        Selector that is visible once search results have rendered.
        """

    @property
    @abstractmethod
    def next_page_selector(self) -> str:
        """
        Selector of the control that advances to the next results page.
        """

    @property
    @abstractmethod
    def detail_ready_selectors(self) -> tuple[str, ...]:
        """
        Selectors that must all be visible before a detail page is read.
        """

    @abstractmethod
    async def count_items(self, session: AutomationSession) -> int:
        """
        Number of item cards visible on the current search page.
        """

    @abstractmethod
    async def open_item(self, session: AutomationSession, index: int) -> CardClickResult:
        """
        Click the item card at `index` and report the card's link.
        """

    @abstractmethod
    async def extract_detail(self, session: AutomationSession) -> dict[str, Any]:
        """
        Raw field values read from the current detail page.
        """
