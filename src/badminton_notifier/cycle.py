"""One scrape → diff → notify → persist cycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import structlog

from .changes import build_state, has_changed, reconcile
from .config import Settings
from .models import SlotHit
from .notifier import EmailNotifier
from .scraper import AvailabilityScraper
from .state import load_state, save_state

LOGGER = structlog.get_logger(__name__)


@dataclass
class CycleResult:
    """What a single cycle observed and did."""

    started_at: datetime
    hits: List[SlotHit] = field(default_factory=list)
    changed: bool = False
    notified: bool = False


class NotificationCycle:
    """Runs the full pipeline once per call to :meth:`run`."""

    def __init__(
        self,
        settings: Settings,
        *,
        scraper: Optional[AvailabilityScraper] = None,
        notifier: Optional[EmailNotifier] = None,
    ):
        self._settings = settings
        self._scraper = scraper or AvailabilityScraper(settings)
        self._notifier = notifier or EmailNotifier(settings)

    async def run(self) -> CycleResult:
        """Execute one cycle.

        The current state is written even when sending the email fails; the
        send error is re-raised afterwards.
        """
        result = CycleResult(started_at=datetime.now(timezone.utc))
        LOGGER.info(
            "cycle.scan.start",
            urls=len(self._settings.urls),
            search_texts=len(self._settings.search_texts),
        )

        result.hits = await self._scraper.run()
        current = build_state(result.hits)

        previous = load_state(self._settings.state_file)
        reconciled = reconcile(previous, current.keys())
        LOGGER.info(
            "cycle.state",
            hits=len(result.hits),
            previous_urls=len(previous),
            current_urls=len(current),
        )

        result.changed = has_changed(current, reconciled)
        try:
            if result.changed:
                LOGGER.info("cycle.changed", hits=len(result.hits))
                result.notified = await self._notifier.notify(result.hits)
            else:
                LOGGER.info("cycle.unchanged")
        finally:
            save_state(self._settings.state_file, current)

        return result
