"""Fixed-interval runner that never overlaps cycles."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

import structlog

LOGGER = structlog.get_logger(__name__)


class Scheduler:
    """Runs ``job`` immediately and then every ``interval_seconds``.

    A tick that arrives while the previous job is still running is skipped.
    Exceptions raised by the job are logged and do not stop the schedule.
    """

    def __init__(self, job: Callable[[], Awaitable[Any]], *, interval_seconds: float):
        self._job = job
        self._interval = interval_seconds
        self._stop = asyncio.Event()
        self._current: Optional[asyncio.Task] = None
        self.completed = 0
        self.failed = 0
        self.skipped = 0

    @property
    def running(self) -> bool:
        return self._current is not None and not self._current.done()

    def tick(self) -> Optional[asyncio.Task]:
        """Start a cycle unless one is still in progress."""
        if self.running:
            self.skipped += 1
            LOGGER.warning("scheduler.tick_skipped", reason="previous cycle still running")
            return None
        self._current = asyncio.create_task(self._run_job())
        return self._current

    async def run_forever(self) -> None:
        """Tick now and on every interval until :meth:`stop` is called."""
        self._stop.clear()
        LOGGER.info("scheduler.start", interval_seconds=self._interval)
        self.tick()
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                self.tick()

        if self._current is not None:
            await self._current
        LOGGER.info("scheduler.stopped", completed=self.completed, failed=self.failed, skipped=self.skipped)

    def stop(self) -> None:
        self._stop.set()

    async def _run_job(self) -> None:
        started_at = datetime.now(timezone.utc)
        LOGGER.info("cycle.start", started_at=started_at.isoformat())
        try:
            await self._job()
        except Exception as exc:  # noqa: BLE001
            self.failed += 1
            LOGGER.exception("cycle.failed", started_at=started_at.isoformat(), error=str(exc))
            return
        self.completed += 1
        elapsed = (datetime.now(timezone.utc) - started_at).total_seconds()
        LOGGER.info("cycle.complete", elapsed_seconds=round(elapsed, 2))
