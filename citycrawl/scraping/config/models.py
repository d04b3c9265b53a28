"""
Scraping configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class SourceProfile:
    """
    Site-specific selectors for one paginated listing source.
    """

    name: str
    search_url_template: str
    card_selector: str
    card_container_selector: str
    next_page_selector: str
    detail_ready_selectors: tuple[str, ...]
    field_selectors: dict[str, list[str]] = field(default_factory=dict)

    def selectors_for(self, field_name: str) -> list[str]:
        return self.field_selectors.get(field_name.strip().lower(), [])


@dataclass(frozen=True)
class ScrapeSettings:
    """
    Runtime settings for one multi-city scrape run.
    """

    units: tuple[str, ...]
    pool_size: int = 3
    max_pages: int = 2
    max_items_per_page: int = 2
    run_timeout_seconds: float = 5400.0
    page_timeout_seconds: float = 45.0
    detail_timeout_seconds: float = 35.0
    delay_min_seconds: float = 3.0
    delay_max_seconds: float = 9.0
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    profile_path: str = ""
    out_file: str = "all_listings.json"
    csv_out_file: str | None = None
    persist: bool = False
    top_rated_limit: int = 5
    storage_batch_size: int = 1000

    def with_overrides(self, **overrides: Any) -> "ScrapeSettings":
        """
        Return a copy with non-None overrides applied.
        """

        applied = {key: value for key, value in overrides.items() if value is not None}
        if "units" in applied:
            applied["units"] = tuple(applied["units"])
        return replace(self, **applied)
