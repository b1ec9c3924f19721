"""Weekend eligibility rules for scraped slots."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import AbstractSet

WEEKEND_DAY_PATTERN = re.compile(r"(Sat|Sun)", re.IGNORECASE)


@dataclass(frozen=True)
class AvailabilityVerdict:
    """Outcome of the weekend filter for one slot."""

    is_weekend_day: bool
    is_weekend_slot: bool

    @property
    def accepted(self) -> bool:
        # Weekend days only admit the configured weekend times.
        return not (self.is_weekend_day and not self.is_weekend_slot)


def slot_time(search_text: str) -> str:
    """Time-of-day part of a search string, e.g. ``17:00`` for ``17:00 Badminton``."""
    return search_text.split(" ", 1)[0]


def is_weekend_day(label: str) -> bool:
    return WEEKEND_DAY_PATTERN.search(label) is not None


def evaluate_slot(label: str, search_text: str, weekend_slot_times: AbstractSet[str]) -> AvailabilityVerdict:
    """Apply the weekend rules to a slot with the given label and search string."""
    return AvailabilityVerdict(
        is_weekend_day=is_weekend_day(label),
        is_weekend_slot=slot_time(search_text) in weekend_slot_times,
    )
