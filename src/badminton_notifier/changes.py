"""Change detection between the current scrape and the persisted state."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping

from .models import NotificationState, SlotHit
from .state import dump_state, normalize_state


def build_state(hits: Iterable[SlotHit]) -> NotificationState:
    """Group hit signatures by source URL."""
    grouped: Dict[str, List[str]] = {}
    for hit in hits:
        grouped.setdefault(hit.url, []).append(hit.signature)
    return normalize_state(grouped)


def reconcile(previous: Mapping[str, Iterable[str]], current_urls: Iterable[str]) -> NotificationState:
    """Drop previous entries for URLs the current scrape did not report."""
    keep = set(current_urls)
    return normalize_state({url: signatures for url, signatures in previous.items() if url in keep})


def has_changed(current: Mapping[str, Iterable[str]], previous: Mapping[str, Iterable[str]]) -> bool:
    return dump_state(current) != dump_state(previous)
