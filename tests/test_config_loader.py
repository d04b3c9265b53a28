"""
tests/test_config_loader.py

Environment-driven scrape settings and JSON selector profiles.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from citycrawl.scraping.config import get_scrape_settings, load_source_profile, split_units
from citycrawl.scraping.config.loader import DEFAULT_PROFILE_PATH, DEFAULT_UNITS

_ENV_NAMES = (
    "CITY_SCRAPE_UNITS",
    "CITY_SCRAPE_WORKERS",
    "CITY_SCRAPE_MAX_PAGES",
    "CITY_SCRAPE_MAX_ITEMS_PER_PAGE",
    "CITY_SCRAPE_RUN_TIMEOUT_SECONDS",
    "CITY_SCRAPE_DELAY_MIN_SECONDS",
    "CITY_SCRAPE_DELAY_MAX_SECONDS",
    "CITY_SCRAPE_HEADLESS",
    "CITY_SCRAPE_PERSIST",
    "CITY_SCRAPE_CSV_OUT_FILE",
    "CITY_SCRAPE_PROFILE_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    get_scrape_settings.cache_clear()
    yield
    get_scrape_settings.cache_clear()


class TestSplitUnits:
    def test_drops_blanks_and_strips(self) -> None:
        assert split_units(" Paris, ,Sydney ,") == ("Paris", "Sydney")

    def test_empty_string(self) -> None:
        assert split_units("") == ()


class TestGetScrapeSettings:
    def test_defaults(self) -> None:
        settings = get_scrape_settings()

        assert settings.units == DEFAULT_UNITS
        assert settings.pool_size == 3
        assert settings.max_pages == 2
        assert settings.max_items_per_page == 2
        assert settings.run_timeout_seconds == 5400.0
        assert settings.headless is True
        assert settings.persist is False
        assert settings.csv_out_file is None
        assert settings.profile_path == str(DEFAULT_PROFILE_PATH)

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CITY_SCRAPE_UNITS", "Lima, Oslo")
        monkeypatch.setenv("CITY_SCRAPE_WORKERS", "5")
        monkeypatch.setenv("CITY_SCRAPE_HEADLESS", "false")
        monkeypatch.setenv("CITY_SCRAPE_PERSIST", "yes")
        monkeypatch.setenv("CITY_SCRAPE_CSV_OUT_FILE", "out.csv")

        settings = get_scrape_settings()

        assert settings.units == ("Lima", "Oslo")
        assert settings.pool_size == 5
        assert settings.headless is False
        assert settings.persist is True
        assert settings.csv_out_file == "out.csv"

    def test_invalid_values_are_clamped_or_defaulted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CITY_SCRAPE_WORKERS", "0")
        monkeypatch.setenv("CITY_SCRAPE_MAX_PAGES", "not-a-number")
        monkeypatch.setenv("CITY_SCRAPE_DELAY_MIN_SECONDS", "5")
        monkeypatch.setenv("CITY_SCRAPE_DELAY_MAX_SECONDS", "1")

        settings = get_scrape_settings()

        assert settings.pool_size == 1
        assert settings.max_pages == 2
        assert settings.delay_min_seconds == 5.0
        assert settings.delay_max_seconds == 5.0

    def test_result_is_cached(self) -> None:
        assert get_scrape_settings() is get_scrape_settings()

    def test_with_overrides_skips_none(self) -> None:
        settings = get_scrape_settings().with_overrides(units=["Rome"], pool_size=None, max_pages=4)

        assert settings.units == ("Rome",)
        assert settings.pool_size == 3
        assert settings.max_pages == 4


class TestLoadSourceProfile:
    def test_bundled_profile_loads(self) -> None:
        profile = load_source_profile(profile_path=str(DEFAULT_PROFILE_PATH))

        assert "{unit}" in profile.search_url_template
        assert profile.card_selector
        assert profile.detail_ready_selectors
        assert profile.selectors_for("Title")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_source_profile(profile_path=str(tmp_path / "nope.json"))

    def test_missing_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"name": "x"}), encoding="utf-8")

        with pytest.raises(ValueError, match="missing keys"):
            load_source_profile(profile_path=str(path))

    def test_template_needs_unit_placeholder(self, tmp_path: Path) -> None:
        path = tmp_path / "profile.json"
        path.write_text(
            json.dumps(
                {
                    "name": "x",
                    "search_url_template": "https://example.test/search",
                    "card_selector": ".card",
                    "card_container_selector": ".results",
                    "next_page_selector": "a.next",
                    "detail_ready_selectors": "h1",
                }
            ),
            encoding="utf-8",
        )

        with pytest.raises(ValueError, match="unit"):
            load_source_profile(profile_path=str(path))
