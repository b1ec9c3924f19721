"""Persistence of the last notified availability, one JSON file per deployment.

File format: a JSON object keyed by source URL (sorted), each value a sorted
list of unique hit signatures::

    {
      "https://.../?week=0": ["Wed 10.04. - Court 2, Court 5"]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping, Union

import structlog

from .models import NotificationState

LOGGER = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def normalize_state(state: Mapping[str, Iterable[str]]) -> NotificationState:
    """Sort URLs and deduplicate/sort each URL's signatures."""
    return {url: sorted(set(state[url])) for url in sorted(state)}


def dump_state(state: Mapping[str, Iterable[str]]) -> str:
    """Canonical text form of a state, used both on disk and for comparison."""
    return json.dumps(normalize_state(state), indent=2, ensure_ascii=False)


def load_state(path: PathLike) -> NotificationState:
    """Read the previous state; a missing or unreadable file yields ``{}``."""
    state_path = Path(path)
    if not state_path.exists():
        LOGGER.info("state.missing", path=str(state_path))
        return {}

    try:
        raw = json.loads(state_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        LOGGER.warning("state.corrupt", path=str(state_path), error=str(exc))
        return {}

    if not _is_state(raw):
        LOGGER.warning("state.corrupt", path=str(state_path), error="unexpected structure")
        return {}
    return normalize_state(raw)


def save_state(path: PathLike, state: Mapping[str, Iterable[str]]) -> None:
    state_path = Path(path)
    state_path.parent.mkdir(parents=True, exist_ok=True)
    state_path.write_text(dump_state(state) + "\n", encoding="utf-8")
    LOGGER.info("state.saved", path=str(state_path), urls=len(state))


def _is_state(raw: object) -> bool:
    if not isinstance(raw, dict):
        return False
    for url, signatures in raw.items():
        if not isinstance(url, str) or not isinstance(signatures, list):
            return False
        if not all(isinstance(signature, str) for signature in signatures):
            return False
    return True
