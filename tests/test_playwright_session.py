"""
tests/test_playwright_session.py

Playwright adapter error mapping and session acquisition, with mocked
browser objects (no browser is launched).
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from citycrawl.scraping.errors import (
    SessionAcquisitionError,
    SessionOperationError,
    SessionTimeoutError,
)
from citycrawl.scraping.session.playwright_session import PlaywrightSession, PlaywrightSessionFactory
from fakes import make_settings


def _session(page: MagicMock | None = None, context: MagicMock | None = None) -> PlaywrightSession:
    return PlaywrightSession(
        context=context or AsyncMock(),
        page=page or AsyncMock(),
        navigation_timeout_seconds=2.0,
    )


class TestPlaywrightSession:
    @pytest.mark.asyncio
    async def test_navigate_uses_millisecond_timeout(self) -> None:
        page = AsyncMock()

        await _session(page).navigate("https://example.test")

        page.goto.assert_awaited_once_with(
            "https://example.test",
            wait_until="domcontentloaded",
            timeout=2000.0,
        )

    @pytest.mark.asyncio
    async def test_timeout_maps_to_session_timeout(self) -> None:
        page = AsyncMock()
        page.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 1000ms exceeded")

        with pytest.raises(SessionTimeoutError):
            await _session(page).wait_until_ready("h1", 1.0)

    @pytest.mark.asyncio
    async def test_other_errors_map_to_operation_error(self) -> None:
        page = AsyncMock()
        page.click.side_effect = PlaywrightError("Target closed")

        with pytest.raises(SessionOperationError) as excinfo:
            await _session(page).click("a.next", 1.0)
        assert not isinstance(excinfo.value, SessionTimeoutError)

    @pytest.mark.asyncio
    async def test_current_location_reads_page_url(self) -> None:
        page = AsyncMock()
        page.url = "https://example.test/rooms/1"

        assert await _session(page).current_location() == "https://example.test/rooms/1"

    @pytest.mark.asyncio
    async def test_close_swallows_playwright_errors(self) -> None:
        context = AsyncMock()
        context.close.side_effect = PlaywrightError("already closed")

        await _session(context=context).close()

        context.close.assert_awaited_once()


class TestPlaywrightSessionFactory:
    @pytest.mark.asyncio
    async def test_create_requires_started_browser(self) -> None:
        factory = PlaywrightSessionFactory(settings=make_settings(("Paris",)))

        with pytest.raises(SessionAcquisitionError):
            await factory.create(unit="Paris")

    @pytest.mark.asyncio
    async def test_failed_page_open_closes_context(self) -> None:
        factory = PlaywrightSessionFactory(settings=make_settings(("Paris",)))
        context = AsyncMock()
        context.new_page.side_effect = PlaywrightError("crashed")
        browser = AsyncMock()
        browser.new_context.return_value = context
        factory._browser = browser

        with pytest.raises(SessionAcquisitionError, match="Paris"):
            await factory.create(unit="Paris")

        context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_session_context_manager_closes_context(self) -> None:
        factory = PlaywrightSessionFactory(settings=make_settings(("Paris",)))
        context = AsyncMock()
        browser = AsyncMock()
        browser.new_context.return_value = context
        factory._browser = browser

        with pytest.raises(RuntimeError):
            async with factory.session(unit="Paris"):
                raise RuntimeError("job failed")

        context.close.assert_awaited_once()
