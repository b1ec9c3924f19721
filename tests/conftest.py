from __future__ import annotations

import pytest

from tests.helpers import FakeSMTP, make_settings


@pytest.fixture
def state_file(tmp_path):
    return tmp_path / "notification-state.json"


@pytest.fixture
def settings(state_file):
    return make_settings(state_file)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr("badminton_notifier.notifier.smtplib.SMTP", FakeSMTP)
    monkeypatch.setattr("badminton_notifier.notifier.smtplib.SMTP_SSL", FakeSMTP)
    return FakeSMTP
