"""Shared fakes and utilities for unit tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from badminton_notifier.config import Settings
from badminton_notifier.models import SlotHit, WaitOutcome

URL_THIS_WEEK = "https://sportuni.example/omasivu/?page=selection&type=3&week=0"
URL_NEXT_WEEK = "https://sportuni.example/omasivu/?page=selection&type=3&week=1"

LISTING_PAGE = "<html><body><ul><li>Badminton listing</li></ul></body></html>"
BLANK_URL = "about:blank"


def make_settings(state_file: Path, **overrides: Any) -> Settings:
    """Settings that never read the real environment or a ``.env`` file."""
    values: Dict[str, Any] = {
        "email_from": "notifier@example.com",
        "email_to": "alice@example.com; bob@example.com",
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_user": "notifier",
        "smtp_password": "secret",
        "state_file": state_file,
        "urls": [URL_THIS_WEEK, URL_NEXT_WEEK],
        "search_texts": ["16:00 Badminton", "17:00 Badminton", "19:00 Badminton"],
        "weekend_slot_times": ["16:00", "17:00"],
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def detail_page(label: str, courts: Iterable[int], *, heading: Optional[str] = None) -> str:
    """Markup resembling a SportUni slot detail view."""
    buttons = "".join(f'<a class="ui-btn">Book court {number}</a>' for number in courts)
    heading_html = f'<li role="heading">{heading}</li>' if heading else ""
    bold = f"<b>{label}</b>" if label else ""
    return f"<html><body><ul>{heading_html}</ul>{bold}<div>{buttons}</div></body></html>"


def make_hit(url: str, label: str, courts: Iterable[str], search_text: str = "17:00 Badminton") -> SlotHit:
    return SlotHit(
        url=url,
        label=label,
        search_text=search_text,
        courts=tuple(courts),
        is_weekend_day=False,
        is_weekend_slot=False,
    )


class FakeNavigator:
    """In-memory stand-in for ``PageNavigator`` with browser-like history.

    ``site`` maps URL -> search text -> detail markup. Clicking a search text
    pushes a detail entry onto the history (or, for ``in_place_clicks``,
    swaps the listing for the detail without a new entry); ``go_back`` pops
    one entry, ending at ``about:blank``.
    """

    def __init__(
        self,
        site: Dict[str, Dict[str, str]],
        *,
        failing_clicks: Iterable[str] = (),
        failing_urls: Iterable[str] = (),
        failing_back: bool = False,
        in_place_clicks: Iterable[str] = (),
    ) -> None:
        self.site = site
        self.failing_clicks = set(failing_clicks)
        self.failing_urls = set(failing_urls)
        self.failing_back = failing_back
        self.in_place_clicks = set(in_place_clicks)
        self.history: List[Tuple[str, str, Optional[str]]] = [(BLANK_URL, BLANK_URL, None)]
        self.opened: List[str] = []
        self.clicked: List[str] = []
        self.back_count = 0
        self.close_count = 0

    def __call__(self, settings: Settings) -> "FakeNavigator":
        return self

    async def __aenter__(self) -> "FakeNavigator":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def listing(self) -> str:
        """Source URL whose listing (or detail) is currently shown."""
        return self.history[-1][1]

    @property
    def detail(self) -> Optional[str]:
        return self.history[-1][2]

    def current_url(self) -> str:
        return self.history[-1][0]

    async def open(self, url: str) -> WaitOutcome:
        self.opened.append(url)
        if url in self.failing_urls:
            raise RuntimeError(f"navigation to {url} failed")
        self.history.append((url, url, None))
        return WaitOutcome.READY

    async def find_all(self, text: str) -> List[str]:
        if self.detail is not None:
            return []
        return [text] if text in self.site.get(self.listing, {}) else []

    async def locate(self, text: str) -> Optional[str]:
        matches = await self.find_all(text)
        return matches[0] if matches else None

    async def click(self, element: str) -> None:
        self.clicked.append(element)
        if element in self.failing_clicks:
            raise RuntimeError(f"element {element!r} is stale")
        url, listing, _ = self.history[-1]
        detail = self.site[listing][element]
        if element in self.in_place_clicks:
            self.history[-1] = (url, listing, detail)
        else:
            self.history.append((f"{url}#{element}", listing, detail))

    async def wait_for_content(self, predicate, timeout_seconds: float) -> WaitOutcome:
        if predicate(await self.get_source()):
            return WaitOutcome.READY
        return WaitOutcome.TIMED_OUT

    async def get_source(self) -> str:
        return self.detail if self.detail is not None else LISTING_PAGE

    async def go_back(self) -> WaitOutcome:
        self.back_count += 1
        if self.failing_back:
            raise RuntimeError("history navigation failed")
        if len(self.history) > 1:
            self.history.pop()
        return WaitOutcome.READY

    async def close(self) -> None:
        self.close_count += 1


class FakeClock:
    """Monotonic clock that advances ``step`` seconds on every read."""

    def __init__(self, step: float) -> None:
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


class StubScraper:
    def __init__(self, hits: List[SlotHit]) -> None:
        self.hits = hits
        self.runs = 0

    async def run(self) -> List[SlotHit]:
        self.runs += 1
        return list(self.hits)


class RecordingNotifier:
    def __init__(self, *, error: Optional[Exception] = None) -> None:
        self.error = error
        self.calls: List[List[SlotHit]] = []

    async def notify(self, hits) -> bool:
        self.calls.append(list(hits))
        if self.error is not None:
            raise self.error
        return bool(hits)


class FakeSMTP:
    """Records what ``smtplib.SMTP`` would have done."""

    instances: List["FakeSMTP"] = []

    def __init__(self, host: str, port: int, timeout: float = 0, context=None) -> None:
        self.host = host
        self.port = port
        self.context = context
        self.started_tls = False
        self.logged_in: Optional[tuple] = None
        self.sent: List[Any] = []
        self.closed = False
        FakeSMTP.instances.append(self)

    def __enter__(self) -> "FakeSMTP":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    def ehlo(self) -> None:
        pass

    def has_extn(self, name: str) -> bool:
        return name == "starttls"

    def starttls(self, context=None) -> None:
        self.started_tls = True

    def login(self, user: str, password: str) -> None:
        self.logged_in = (user, password)

    def send_message(self, message) -> None:
        self.sent.append(message)
