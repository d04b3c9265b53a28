"""
Selector-profile driven listing source.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

from citycrawl.scraping.config.models import SourceProfile
from citycrawl.scraping.errors import SessionOperationError
from citycrawl.scraping.parsing import DetailPageParser
from citycrawl.scraping.session.base import AutomationSession
from citycrawl.scraping.sources.base import CardClickResult, ListingSource

_COUNT_SCRIPT = "document.querySelectorAll({selector}).length"
_DOCUMENT_HTML_SCRIPT = "document.documentElement.outerHTML"
_CLICK_CARD_SCRIPT = """
(() => {{
    const nodes = Array.from(document.querySelectorAll({selector}));
    const idx = {index};
    if (nodes.length <= idx) return {{ ok: false, href: '' }};
    const el = nodes[idx];
    const anchor = el.tagName === 'A'
        ? el
        : (el.closest('a[href]') || el.querySelector('a[href]'));
    const href = anchor ? (anchor.href || '') : '';
    el.click();
    return {{ ok: true, href }};
}})();
"""


class ProfiledListingSource(ListingSource):
    """
    Listing source whose selectors all come from a SourceProfile.
    """

    def __init__(self, *, profile: SourceProfile) -> None:
        self.profile = profile
        self.name = profile.name

    def search_url(self, unit: str) -> str:
        return self.profile.search_url_template.format(unit=quote(unit.strip(), safe=""))

    @property
    def card_selector(self) -> str:
        return self.profile.card_selector

    @property
    def card_container_selector(self) -> str:
        return self.profile.card_container_selector

    @property
    def next_page_selector(self) -> str:
        return self.profile.next_page_selector

    @property
    def detail_ready_selectors(self) -> tuple[str, ...]:
        return self.profile.detail_ready_selectors

    async def count_items(self, session: AutomationSession) -> int:
        raw = await session.evaluate(
            _COUNT_SCRIPT.format(selector=json.dumps(self.profile.card_selector))
        )
        try:
            return max(0, int(raw))
        except (TypeError, ValueError) as exc:
            raise SessionOperationError(f"Unexpected card count value: {raw!r}") from exc

    async def open_item(self, session: AutomationSession, index: int) -> CardClickResult:
        raw = await session.evaluate(
            _CLICK_CARD_SCRIPT.format(
                selector=json.dumps(self.profile.card_selector),
                index=int(index),
            )
        )
        if not isinstance(raw, dict):
            return CardClickResult(ok=False)
        return CardClickResult(ok=bool(raw.get("ok")), href=str(raw.get("href") or "").strip())

    async def extract_detail(self, session: AutomationSession) -> dict[str, Any]:
        html = await session.evaluate(_DOCUMENT_HTML_SCRIPT)
        if not isinstance(html, str) or not html.strip():
            raise SessionOperationError("Detail page returned an empty document.")
        return DetailPageParser.parse(html=html, profile=self.profile)
