from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol, Sequence

from .config import Settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, subject: str, body: str) -> None: ...


class LogNotifier:
    """Writes notifications to the log only."""

    def send(self, subject: str, body: str) -> None:
        logger.info("%s\n%s", subject, body, extra={"component": "notify"})


class SmtpNotifier:
    def __init__(self, host: str, port: int, sender: str, recipients: Sequence[str]):
        self.host = host
        self.port = port
        self.sender = sender
        self.recipients = list(recipients)

    def send(self, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = ", ".join(self.recipients)
        msg["Subject"] = subject
        msg.set_content(body)
        with smtplib.SMTP(self.host, self.port) as smtp:
            smtp.send_message(msg)
        logger.info(
            "sent %r to %d recipient(s)", subject, len(self.recipients),
            extra={"component": "notify"},
        )


def build_notifier(settings: Settings) -> Notifier:
    if settings.smtp_host and settings.recipients:
        return SmtpNotifier(
            settings.smtp_host, settings.smtp_port, settings.smtp_sender, settings.recipients
        )
    return LogNotifier()
