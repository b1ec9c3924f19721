"""Extraction of bookable courts and date labels from a slot detail view."""

from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup

BOOKING_MARKER = "Book court"
COURT_NUMBERS = range(1, 7)


def has_booking_marker(markup: str) -> bool:
    """True once the detail view has rendered at least one booking button."""
    return BOOKING_MARKER in markup


def extract_courts(markup: str) -> List[str]:
    """Return the courts carrying a ``Book court N`` marker, in ascending order."""
    return [f"Court {number}" for number in COURT_NUMBERS if f"{BOOKING_MARKER} {number}" in markup]


def resolve_label(markup: str, fallback: str) -> str:
    """Return the date/day label of the detail view.

    Prefers the first ``<b>`` element, then the last ``li[role=heading]``,
    then ``fallback``.
    """
    soup = BeautifulSoup(markup, "html.parser")

    bold = soup.find("b")
    if bold is not None:
        text = bold.get_text().strip()
        if text:
            return text

    headings = soup.select('li[role="heading"]')
    if headings:
        text = headings[-1].get_text().strip()
        if text:
            return text

    return fallback
