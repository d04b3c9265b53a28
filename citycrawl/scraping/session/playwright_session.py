"""
Playwright-backed automation sessions.
"""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from citycrawl.scraping.config.models import ScrapeSettings
from citycrawl.scraping.errors import (
    SessionAcquisitionError,
    SessionOperationError,
    SessionTimeoutError,
)
from citycrawl.scraping.logging_utils import log_event
from citycrawl.scraping.session.base import AutomationSession, SessionFactory

logger = logging.getLogger(__name__)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
]
VIEWPORT = {"width": 1440, "height": 900}


class PlaywrightSession(AutomationSession):
    """
    Session over one Playwright browser context and page.
    """

    def __init__(
        self,
        *,
        context: BrowserContext,
        page: Page,
        navigation_timeout_seconds: float,
    ) -> None:
        self._context = context
        self._page = page
        self._navigation_timeout_ms = navigation_timeout_seconds * 1000

    async def navigate(self, url: str) -> None:
        try:
            await self._page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self._navigation_timeout_ms,
            )
        except PlaywrightTimeoutError as exc:
            raise SessionTimeoutError(f"navigate {url}: {exc}") from exc
        except PlaywrightError as exc:
            raise SessionOperationError(f"navigate {url}: {exc}") from exc

    async def wait_until_ready(self, selector: str, timeout: float) -> None:
        try:
            await self._page.wait_for_selector(
                selector,
                state="visible",
                timeout=timeout * 1000,
            )
        except PlaywrightTimeoutError as exc:
            raise SessionTimeoutError(f"wait for {selector!r}: {exc}") from exc
        except PlaywrightError as exc:
            raise SessionOperationError(f"wait for {selector!r}: {exc}") from exc

    async def evaluate(self, script: str) -> Any:
        try:
            return await self._page.evaluate(script)
        except PlaywrightTimeoutError as exc:
            raise SessionTimeoutError(f"evaluate script: {exc}") from exc
        except PlaywrightError as exc:
            raise SessionOperationError(f"evaluate script: {exc}") from exc

    async def click(self, selector: str, timeout: float) -> None:
        try:
            await self._page.click(selector, timeout=timeout * 1000)
        except PlaywrightTimeoutError as exc:
            raise SessionTimeoutError(f"click {selector!r}: {exc}") from exc
        except PlaywrightError as exc:
            raise SessionOperationError(f"click {selector!r}: {exc}") from exc

    async def current_location(self) -> str:
        return self._page.url

    async def close(self) -> None:
        try:
            await self._context.close()
        except PlaywrightError as exc:
            log_event(logger, logging.WARNING, "session_close_failed", error=str(exc))


class PlaywrightSessionFactory(SessionFactory):
    """
    One Chromium process per run, one fresh browser context per job.
    """

    def __init__(self, *, settings: ScrapeSettings) -> None:
        self._settings = settings
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def start(self) -> None:
        if self._browser is not None:
            return
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self._settings.headless,
            args=BROWSER_ARGS,
        )
        log_event(
            logger,
            logging.INFO,
            "browser_started",
            headless=self._settings.headless,
        )

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def __aenter__(self) -> "PlaywrightSessionFactory":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def create(self, *, unit: str) -> AutomationSession:
        if self._browser is None:
            raise SessionAcquisitionError("Browser is not started; call start() first.")

        context: BrowserContext | None = None
        try:
            context = await self._browser.new_context(
                user_agent=self._settings.user_agent,
                viewport=VIEWPORT,
            )
            page = await context.new_page()
        except PlaywrightError as exc:
            if context is not None:
                await context.close()
            raise SessionAcquisitionError(f"Unable to open session for unit='{unit}': {exc}") from exc

        return PlaywrightSession(
            context=context,
            page=page,
            navigation_timeout_seconds=self._settings.page_timeout_seconds,
        )
