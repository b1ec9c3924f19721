"""Playwright automation for the SportUni booking pages."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import Callable, List, Optional

import structlog
from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Locator,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import Settings
from .models import WaitOutcome

LOGGER = structlog.get_logger(__name__)

READY_SELECTOR = "body"
POLL_INTERVAL_SECONDS = 0.25


def _xpath_literal(text: str) -> str:
    if '"' not in text:
        return f'"{text}"'
    if "'" not in text:
        return f"'{text}'"
    parts = text.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"


def text_xpath(text: str) -> str:
    """XPath for the innermost elements whose normalised text contains ``text``."""
    literal = _xpath_literal(text)
    return (
        f"xpath=//*[contains(normalize-space(.), {literal})"
        f" and not(*[contains(normalize-space(.), {literal})])]"
    )


class PageNavigator:
    """Owns one headless browser page and exposes navigation primitives.

    Timeouts are reported as ``WaitOutcome.TIMED_OUT``; any other Playwright
    error propagates to the caller.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None
        self._closed = False

    async def __aenter__(self) -> "PageNavigator":
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._settings.headless,
                args=[
                    "--disable-dev-shm-usage",
                    "--no-sandbox",
                ],
            )
            context = await self._browser.new_context()
            self._page = await context.new_page()
        except BaseException:
            await self.close()
            raise
        LOGGER.info("browser.started", headless=self._settings.headless)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def page(self) -> Page:
        if not self._page:
            raise RuntimeError("Playwright page has not been initialised")
        return self._page

    async def open(self, url: str) -> WaitOutcome:
        """Load ``url`` and wait until the document body is present."""
        timeout_ms = self._settings.page_timeout_seconds * 1000
        LOGGER.info("page.load.start", url=url)
        try:
            await self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            await self.page.wait_for_selector(READY_SELECTOR, timeout=timeout_ms)
        except PlaywrightTimeoutError:
            LOGGER.warning("page.load.timeout", url=url, timeout_seconds=self._settings.page_timeout_seconds)
            return WaitOutcome.TIMED_OUT
        return WaitOutcome.READY

    def current_url(self) -> str:
        return self.page.url

    def _matching(self, text: str) -> Locator:
        return self.page.locator(text_xpath(text))

    async def find_all(self, text: str) -> List[Locator]:
        """Every element whose visible text contains ``text``, in document order."""
        return await self._matching(text).all()

    async def locate(self, text: str) -> Optional[Locator]:
        """First element whose visible text contains ``text``, or ``None``."""
        matches = self._matching(text)
        if await matches.count() == 0:
            return None
        return matches.first

    async def click(self, element: Locator) -> None:
        """Scroll ``element`` into view, give it a moment to become visible, then click."""
        timeout_ms = self._settings.element_timeout_seconds * 1000
        await element.evaluate("el => el.scrollIntoView({block: 'center'})")
        with suppress(PlaywrightTimeoutError):
            await element.wait_for(state="visible", timeout=self._settings.visibility_timeout_seconds * 1000)
        await element.click(timeout=timeout_ms)

    async def wait_for_content(self, predicate: Callable[[str], bool], timeout_seconds: float) -> WaitOutcome:
        """Poll the rendered markup until ``predicate`` holds or the timeout elapses."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_seconds
        while True:
            try:
                if predicate(await self.page.content()):
                    return WaitOutcome.READY
            except PlaywrightError:
                # The page may be mid-navigation; try again on the next poll.
                LOGGER.debug("page.content_unavailable")
            if loop.time() >= deadline:
                return WaitOutcome.TIMED_OUT
            await asyncio.sleep(POLL_INTERVAL_SECONDS)

    async def go_back(self) -> WaitOutcome:
        """Navigate one step back in history and wait for the page body."""
        timeout_ms = self._settings.navigation_timeout_seconds * 1000
        try:
            await self.page.go_back(wait_until="domcontentloaded", timeout=timeout_ms)
            await self.page.wait_for_selector(READY_SELECTOR, timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return WaitOutcome.TIMED_OUT
        return WaitOutcome.READY

    async def get_source(self) -> str:
        return await self.page.content()

    async def close(self) -> None:
        """Release the page, browser and Playwright driver. Safe to call twice."""
        if self._closed:
            return
        self._closed = True

        if self._page:
            try:
                await self._page.context.close()
            except PlaywrightError as exc:
                LOGGER.warning("browser.context_close_failed", error=str(exc))
        if self._browser:
            try:
                await self._browser.close()
            except PlaywrightError as exc:
                LOGGER.warning("browser.close_failed", error=str(exc))
        if self._playwright:
            await self._playwright.stop()
        LOGGER.info("browser.closed")
