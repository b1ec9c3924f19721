"""Walks the configured pages and time slots and collects bookable hits."""

from __future__ import annotations

import time
from typing import Any, Callable, List, Optional

import structlog

from .availability import evaluate_slot
from .config import Settings
from .extractor import extract_courts, has_booking_marker, resolve_label
from .models import SlotHit, WaitOutcome
from .navigator import PageNavigator

LOGGER = structlog.get_logger(__name__)

NavigatorFactory = Callable[[Settings], Any]


class AvailabilityScraper:
    """Drives one browser session over every URL and search string.

    Each URL is loaded once. For every search string the first matching
    element is clicked, the detail view is read and the browser navigates
    back. Failures are contained to the slot (or URL) they happen on, and a
    wall-clock budget stops the run between URLs.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        navigator_factory: NavigatorFactory = PageNavigator,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._settings = settings
        self._navigator_factory = navigator_factory
        self._clock = clock

    async def run(self) -> List[SlotHit]:
        """Scrape every configured URL and return the hits found so far."""
        hits: List[SlotHit] = []
        started = self._clock()
        LOGGER.info(
            "scrape.start",
            urls=len(self._settings.urls),
            search_texts=len(self._settings.search_texts),
        )

        async with self._navigator_factory(self._settings) as navigator:
            for index, url in enumerate(self._settings.urls):
                elapsed = self._clock() - started
                if elapsed > self._settings.scrape_budget_seconds:
                    LOGGER.warning(
                        "scrape.budget_exhausted",
                        elapsed_seconds=round(elapsed, 2),
                        skipped_urls=len(self._settings.urls) - index,
                    )
                    break

                try:
                    await self._scrape_url(navigator, url, hits)
                except Exception as exc:  # noqa: BLE001
                    LOGGER.exception("scrape.url_failed", url=url, error=str(exc))

        LOGGER.info(
            "scrape.complete",
            elapsed_seconds=round(self._clock() - started, 2),
            hits=len(hits),
        )
        return hits

    async def _scrape_url(self, navigator, url: str, hits: List[SlotHit]) -> None:
        """Inspect every search string on one page, appending hits in place."""
        if await navigator.open(url) is WaitOutcome.TIMED_OUT:
            LOGGER.warning("scrape.page_not_ready", url=url)
        listing_url = navigator.current_url()

        for search_text in self._settings.search_texts:
            try:
                element = await navigator.locate(search_text)
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("slot.locate_failed", url=url, search_text=search_text, error=str(exc))
                continue

            if element is None:
                LOGGER.debug("slot.not_listed", url=url, search_text=search_text)
                continue

            clicked = False
            try:
                await navigator.click(element)
                clicked = True
                hit = await self._inspect_slot(navigator, url, search_text)
                if hit is not None:
                    LOGGER.info("slot.hit", url=url, label=hit.label, courts=list(hit.courts))
                    hits.append(hit)
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("slot.failed", url=url, search_text=search_text, error=str(exc))
            finally:
                await self._return_to_listing(navigator, url, listing_url, search_text, clicked=clicked)

    async def _inspect_slot(self, navigator, url: str, search_text: str) -> Optional[SlotHit]:
        """Read the detail view opened for one slot and turn it into a hit if it qualifies."""
        outcome = await navigator.wait_for_content(
            has_booking_marker,
            self._settings.element_timeout_seconds,
        )
        if outcome is WaitOutcome.TIMED_OUT:
            LOGGER.debug("slot.no_booking_marker", url=url, search_text=search_text)

        source = await navigator.get_source()
        courts = extract_courts(source)
        if not courts:
            return None

        label = resolve_label(source, search_text)
        verdict = evaluate_slot(label, search_text, self._settings.weekend_slot_times)
        if not verdict.accepted:
            LOGGER.info("slot.rejected_weekend_time", url=url, label=label, search_text=search_text)
            return None

        return SlotHit(
            url=url,
            label=label,
            search_text=search_text,
            courts=tuple(courts),
            is_weekend_day=verdict.is_weekend_day,
            is_weekend_slot=verdict.is_weekend_slot,
        )

    async def _return_to_listing(
        self,
        navigator,
        url: str,
        listing_url: str,
        search_text: str,
        *,
        clicked: bool,
    ) -> None:
        """Get back to the listing page of ``url`` after inspecting a slot.

        History is only popped when the click went through or the page moved
        away; if the browser still is not on the listing afterwards, the
        listing is loaded again.
        """
        if clicked or navigator.current_url() != listing_url:
            try:
                outcome = await navigator.go_back()
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning("slot.navigate_back_failed", url=url, search_text=search_text, error=str(exc))
            else:
                if outcome is WaitOutcome.TIMED_OUT:
                    LOGGER.debug("slot.navigate_back_timeout", url=url, search_text=search_text)

        if navigator.current_url() == listing_url:
            return

        LOGGER.info("slot.listing_reopened", url=url, search_text=search_text)
        try:
            await navigator.open(url)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("slot.listing_reopen_failed", url=url, error=str(exc))
