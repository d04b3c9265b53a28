"""
Environment + JSON config loader for city listing scraping.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from db.config import load_env_files

from citycrawl.scraping.config.models import DEFAULT_USER_AGENT, ScrapeSettings, SourceProfile

DEFAULT_UNITS = ("New York", "Paris", "Sydney")
DEFAULT_PROFILE_PATH = Path(__file__).resolve().parent / "airbnb.json"

_REQUIRED_PROFILE_KEYS = (
    "name",
    "search_url_template",
    "card_selector",
    "card_container_selector",
    "next_page_selector",
    "detail_ready_selectors",
)


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip() or None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


def split_units(raw: str) -> tuple[str, ...]:
    """
    Split a comma-separated unit list, dropping blanks.
    """

    return tuple(part.strip() for part in raw.split(",") if part.strip())


@lru_cache(maxsize=1)
def get_scrape_settings() -> ScrapeSettings:
    """
    Return cached scrape settings from environment variables.
    """

    load_env_files()
    units = split_units(_get_str_env("CITY_SCRAPE_UNITS", ",".join(DEFAULT_UNITS)))
    delay_min = max(0.0, _get_float_env("CITY_SCRAPE_DELAY_MIN_SECONDS", 3.0))
    delay_max = max(delay_min, _get_float_env("CITY_SCRAPE_DELAY_MAX_SECONDS", 9.0))
    profile_path = _get_optional_str_env("CITY_SCRAPE_PROFILE_PATH")

    return ScrapeSettings(
        units=units or DEFAULT_UNITS,
        pool_size=max(1, _get_int_env("CITY_SCRAPE_WORKERS", 3)),
        max_pages=_get_int_env("CITY_SCRAPE_MAX_PAGES", 2),
        max_items_per_page=max(0, _get_int_env("CITY_SCRAPE_MAX_ITEMS_PER_PAGE", 2)),
        run_timeout_seconds=max(
            1.0,
            _get_float_env("CITY_SCRAPE_RUN_TIMEOUT_SECONDS", 90 * 60.0),
        ),
        page_timeout_seconds=max(
            1.0,
            _get_float_env("CITY_SCRAPE_PAGE_TIMEOUT_SECONDS", 45.0),
        ),
        detail_timeout_seconds=max(
            1.0,
            _get_float_env("CITY_SCRAPE_DETAIL_TIMEOUT_SECONDS", 35.0),
        ),
        delay_min_seconds=delay_min,
        delay_max_seconds=delay_max,
        headless=_get_bool_env("CITY_SCRAPE_HEADLESS", True),
        user_agent=_get_str_env("CITY_SCRAPE_USER_AGENT", DEFAULT_USER_AGENT),
        profile_path=str(_resolve_path(profile_path)) if profile_path else str(DEFAULT_PROFILE_PATH),
        out_file=_get_str_env("CITY_SCRAPE_OUT_FILE", "all_listings.json"),
        csv_out_file=_get_optional_str_env("CITY_SCRAPE_CSV_OUT_FILE"),
        persist=_get_bool_env("CITY_SCRAPE_PERSIST", False),
        top_rated_limit=max(1, _get_int_env("CITY_SCRAPE_TOP_RATED_LIMIT", 5)),
        storage_batch_size=max(1, _get_int_env("CITY_SCRAPE_STORAGE_BATCH_SIZE", 1000)),
    )


def load_source_profile(*, profile_path: str) -> SourceProfile:
    """
    Load a listing source selector profile from a JSON file.
    """

    path = _resolve_path(profile_path)
    if not path.exists():
        raise FileNotFoundError(f"Source profile file not found: {path}")

    raw_data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw_data, dict):
        raise ValueError("Invalid source profile: top-level value must be an object.")

    missing = [key for key in _REQUIRED_PROFILE_KEYS if not raw_data.get(key)]
    if missing:
        raise ValueError(f"Invalid source profile: missing keys {', '.join(missing)}.")

    template = str(raw_data["search_url_template"]).strip()
    if "{unit}" not in template:
        raise ValueError("Invalid source profile: 'search_url_template' must contain '{unit}'.")

    return SourceProfile(
        name=str(raw_data["name"]).strip(),
        search_url_template=template,
        card_selector=str(raw_data["card_selector"]).strip(),
        card_container_selector=str(raw_data["card_container_selector"]).strip(),
        next_page_selector=str(raw_data["next_page_selector"]).strip(),
        detail_ready_selectors=tuple(_normalize_selector_list(raw_data["detail_ready_selectors"])),
        field_selectors=_normalize_selectors(raw_data.get("field_selectors", {})),
    )


def _normalize_selector_list(value: object) -> list[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return []


def _normalize_selectors(selectors: object) -> dict[str, list[str]]:
    if not isinstance(selectors, dict):
        return {}

    normalized: dict[str, list[str]] = {}
    for key, value in selectors.items():
        if not isinstance(key, str):
            continue
        normalized[key.strip().lower()] = _normalize_selector_list(value)
    return normalized
