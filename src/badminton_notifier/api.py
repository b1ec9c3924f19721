"""FastAPI application exposing health and on-demand scrape endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

import structlog
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from . import __version__
from .config import ConfigurationError, Settings, load_settings
from .scraper import AvailabilityScraper

LOGGER = structlog.get_logger(__name__)

app = FastAPI(title="Badminton Notifier", version=__version__)


class HealthResponse(BaseModel):
    """Response schema for the /health endpoint."""

    status: str
    version: str


class SlotHitPayload(BaseModel):
    """Serialised bookable slot."""

    url: str
    label: str
    search_text: str
    courts: List[str]
    week_label: str
    is_weekend_day: bool
    is_weekend_slot: bool


class ScrapeResponse(BaseModel):
    """Response schema for the /scrape endpoint."""

    hits: List[SlotHitPayload]
    scraped_at: datetime


def get_settings() -> Settings:
    try:
        return load_settings()
    except ConfigurationError as exc:
        LOGGER.error("api.settings.error", variables=exc.variables)
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def get_scraper(settings: Settings = Depends(get_settings)) -> AvailabilityScraper:
    return AvailabilityScraper(settings)


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@app.post("/scrape", response_model=ScrapeResponse)
async def scrape(scraper: AvailabilityScraper = Depends(get_scraper)) -> ScrapeResponse:
    """Run one scrape without notifying anyone or touching the state file."""

    LOGGER.info("api.scrape.start")
    try:
        hits = await scraper.run()
    except Exception as exc:
        LOGGER.exception("api.scrape.failed", error=str(exc))
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    payload = [
        SlotHitPayload(
            url=hit.url,
            label=hit.label,
            search_text=hit.search_text,
            courts=list(hit.courts),
            week_label=hit.week_label.value,
            is_weekend_day=hit.is_weekend_day,
            is_weekend_slot=hit.is_weekend_slot,
        )
        for hit in hits
    ]
    LOGGER.info("api.scrape.complete", hits=len(payload))
    return ScrapeResponse(hits=payload, scraped_at=datetime.now(timezone.utc))
