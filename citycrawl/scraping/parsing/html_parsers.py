"""
BeautifulSoup-based parsing layer for rendered listing detail pages.
"""

from __future__ import annotations

import re
from typing import Any

from bs4 import BeautifulSoup, Tag

from citycrawl.scraping.config.models import SourceProfile

PRICE_REGEX = re.compile(
    r"(?:USD|US\$|A\$|\$|EUR|€|GBP|£|¥|₹|฿)?\s?\d+(?:[.,]\d{3})*(?:\.\d{1,2})?",
    flags=re.IGNORECASE,
)
RATING_REGEX = re.compile(r"\b[0-5](?:[.,]\d{1,2})?\b")

TEXT_FIELDS = ("title", "location", "description")


class DetailPageParser:
    """
    Deterministic field extraction from detail-page HTML.
    """

    @classmethod
    def parse(cls, *, html: str, profile: SourceProfile) -> dict[str, Any]:
        """
        Return raw field values; missing fields are simply absent.
        """

        soup = BeautifulSoup(html, "html.parser")
        fields: dict[str, Any] = {}

        for field_name in TEXT_FIELDS:
            node = cls._select_first(soup=soup, selectors=profile.selectors_for(field_name))
            if node is not None:
                fields[field_name] = cls._clean_text(node.get_text(" ", strip=True))

        price_node = cls._select_first(soup=soup, selectors=profile.selectors_for("price"))
        if price_node is not None:
            match = PRICE_REGEX.search(cls._clean_text(price_node.get_text(" ", strip=True)))
            if match is not None:
                fields["price"] = match.group(0)

        rating_node = cls._select_first(soup=soup, selectors=profile.selectors_for("rating"))
        if rating_node is not None:
            rating_text = cls._clean_text(rating_node.get_text(" ", strip=True))
            match = RATING_REGEX.search(rating_text.replace(",", "."))
            if match is not None:
                fields["rating"] = match.group(0)

        return fields

    @staticmethod
    def _select_first(*, soup: BeautifulSoup, selectors: list[str]) -> Tag | None:
        for selector in selectors:
            node = soup.select_one(selector)
            if node is not None and node.get_text(strip=True):
                return node
        return None

    @staticmethod
    def _clean_text(value: str) -> str:
        return re.sub(r"\s+", " ", value).strip()
