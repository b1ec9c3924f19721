"""Entry point for the badminton notifier."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from contextlib import suppress
from typing import Optional

import structlog

from .config import ConfigurationError, Settings, load_settings
from .cycle import NotificationCycle
from .notifier import format_digest
from .scheduler import Scheduler
from .scraper import AvailabilityScraper


def configure_logging(level: int = logging.INFO) -> None:
    """Configure structlog + stdlib logging."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stdout,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


LOGGER = structlog.get_logger(__name__)


async def run(settings: Settings) -> None:
    """Run cycles on the configured interval until interrupted."""
    cycle = NotificationCycle(settings)
    scheduler = Scheduler(cycle.run, interval_seconds=settings.poll_interval_seconds)

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(signum, scheduler.stop)

    await scheduler.run_forever()


async def run_once(settings: Settings) -> None:
    result = await NotificationCycle(settings).run()
    LOGGER.info("cycle.result", hits=len(result.hits), changed=result.changed, notified=result.notified)


async def dry_run(settings: Settings, scraper: Optional[AvailabilityScraper] = None) -> str:
    """Scrape once and return the digest that would be emailed."""
    hits = await (scraper or AvailabilityScraper(settings)).run()
    if not hits:
        return "No bookable slots found."
    return format_digest(hits)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """CLI argument parsing."""
    parser = argparse.ArgumentParser(description="Watch SportUni badminton courts and email new openings.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="Run a single cycle and exit.")
    mode.add_argument(
        "--dry-run",
        action="store_true",
        help="Scrape once and print the digest without emailing or writing state.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def cli(argv: Optional[list[str]] = None) -> None:
    """Console script entrypoint."""
    args = parse_args(argv)
    configure_logging(getattr(logging, args.log_level))

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        LOGGER.error("settings.error", variables=exc.variables)
        raise SystemExit(2) from exc

    try:
        if args.dry_run:
            print(asyncio.run(dry_run(settings)))
        elif args.once:
            asyncio.run(run_once(settings))
        else:
            asyncio.run(run(settings))
    except KeyboardInterrupt:  # pragma: no cover - interactive stop
        LOGGER.info("notifier.interrupted")
    except Exception as exc:  # pragma: no cover - top level
        LOGGER.exception("notifier.failed", error=str(exc))
        raise SystemExit(1) from exc


if __name__ == "__main__":  # pragma: no cover
    cli()
