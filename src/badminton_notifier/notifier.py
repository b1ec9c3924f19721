"""Email digest of newly found badminton slots."""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from typing import Dict, List, Sequence

import structlog

from .config import Settings
from .models import SlotHit, WeekLabel

LOGGER = structlog.get_logger(__name__)

SUBJECT = "[Auto] New badminton schedule available"
SMTP_TIMEOUT_SECONDS = 30
IMPLICIT_TLS_PORT = 465


def format_slot(hit: SlotHit) -> str:
    return f"- {hit.label} - {', '.join(hit.courts)}"


def format_digest(hits: Sequence[SlotHit]) -> str:
    """Build the plain-text body, grouping hits by week in order of first appearance."""
    grouped: Dict[WeekLabel, List[SlotHit]] = {}
    for hit in hits:
        grouped.setdefault(hit.week_label, []).append(hit)

    lines: list[str] = ["New schedule found:", ""]
    for week_label, week_hits in grouped.items():
        lines.append(f"{week_label.value}:")
        for hit in week_hits:
            lines.append(format_slot(hit))
        lines.append("")

    return "\n".join(lines)


def build_message(settings: Settings, hits: Sequence[SlotHit]) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = SUBJECT
    message["From"] = settings.email_from
    message["Bcc"] = ", ".join(settings.email_to)
    message.set_content(format_digest(hits))
    return message


class EmailNotifier:
    """Sends the digest to every configured recipient over SMTP."""

    def __init__(self, settings: Settings):
        self._settings = settings

    async def notify(self, hits: Sequence[SlotHit]) -> bool:
        """Email ``hits``; returns ``False`` without sending when there are none."""
        if not hits:
            LOGGER.info("notify.skipped", reason="no hits")
            return False

        message = build_message(self._settings, hits)
        LOGGER.info(
            "notify.send.start",
            host=self._settings.smtp_host,
            port=self._settings.smtp_port,
            recipients=len(self._settings.email_to),
            hits=len(hits),
        )
        await asyncio.to_thread(self._send, message)
        LOGGER.info("notify.send.success")
        return True

    def _send(self, message: EmailMessage) -> None:
        settings = self._settings
        context = ssl.create_default_context()
        if settings.smtp_port == IMPLICIT_TLS_PORT:
            smtp = smtplib.SMTP_SSL(
                settings.smtp_host,
                settings.smtp_port,
                timeout=SMTP_TIMEOUT_SECONDS,
                context=context,
            )
        else:
            smtp = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=SMTP_TIMEOUT_SECONDS)

        with smtp:
            if settings.smtp_port != IMPLICIT_TLS_PORT:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls(context=context)
                    smtp.ehlo()
                else:
                    LOGGER.info("notify.starttls_unavailable", host=settings.smtp_host)
            smtp.login(settings.smtp_user, settings.smtp_password.get_secret_value())
            smtp.send_message(message)
