"""Shared data models used across the badminton notifier."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List
from urllib.parse import parse_qs, urlparse

NotificationState = Dict[str, List[str]]


class WeekLabel(str, Enum):
    """Which booking week a source page shows."""

    THIS_WEEK = "This week"
    NEXT_WEEK = "Next week"
    FUTURE_WEEK = "Future week"


class WaitOutcome(Enum):
    """Result of a bounded wait in the browser."""

    READY = "ready"
    TIMED_OUT = "timed_out"


def derive_week_label(url: str) -> WeekLabel:
    """Classify a source URL by its ``week`` query parameter."""
    values = parse_qs(urlparse(url).query).get("week")
    week = values[0] if values else None
    if week == "0":
        return WeekLabel.THIS_WEEK
    if week == "1":
        return WeekLabel.NEXT_WEEK
    return WeekLabel.FUTURE_WEEK


@dataclass(frozen=True)
class SlotHit:
    """A bookable, in-scope slot found on a source page."""

    url: str
    label: str
    search_text: str
    courts: tuple[str, ...]
    is_weekend_day: bool
    is_weekend_slot: bool

    def __post_init__(self) -> None:
        if not self.courts:
            raise ValueError("SlotHit requires at least one bookable court")

    @property
    def week_label(self) -> WeekLabel:
        return derive_week_label(self.url)

    @property
    def signature(self) -> str:
        """Text used to compare hits between runs."""
        return f"{self.label} - {', '.join(self.courts)}"
