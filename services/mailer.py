"""Outbound email delivery."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formatdate

import aiosmtplib

logger = logging.getLogger(__name__)

MAIL_BACKENDS = ("console", "smtp")
OUTBOX_SIZE = 100


@dataclass
class OutgoingMessage:
    to: str
    subject: str
    body: str


class Mailer:
    """Send plain-text email over SMTP, or log it when the console backend is active.

    The console backend keeps the most recent messages in :attr:`outbox` so
    development servers and tests can read the links that would have been
    emailed.
    """

    def __init__(
        self,
        backend: str = "console",
        *,
        host: str = "localhost",
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        sender: str = "no-reply@localhost",
        timeout: float = 10.0,
        outbox_size: int = OUTBOX_SIZE,
    ):
        if backend not in MAIL_BACKENDS:
            raise ValueError(f"Unknown mail backend: {backend}")
        self.backend = backend
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.timeout = timeout
        self.outbox: deque[OutgoingMessage] = deque(maxlen=outbox_size)

    @classmethod
    def from_config(cls, config) -> "Mailer":
        return cls(
            config.get("MAIL_BACKEND", "smtp"),
            host=config.get("MAIL_SERVER", "localhost"),
            port=int(config.get("MAIL_PORT", 587)),
            username=config.get("MAIL_USERNAME"),
            password=config.get("MAIL_PASSWORD"),
            use_tls=bool(config.get("MAIL_USE_TLS", True)),
            sender=config.get("MAIL_DEFAULT_SENDER", "no-reply@localhost"),
            outbox_size=int(config.get("MAIL_OUTBOX_SIZE", OUTBOX_SIZE)),
        )

    def send(self, to: str, subject: str, body: str) -> None:
        message = OutgoingMessage(to=to, subject=subject, body=body)
        if self.backend == "console":
            self.outbox.append(message)
            logger.info("Email to %s: %s\n%s", to, subject, body)
            return
        asyncio.run(self._send_smtp(message))
        logger.info("Sent email to %s: %s", message.to, message.subject)

    async def _send_smtp(self, message: OutgoingMessage) -> None:
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email["Date"] = formatdate(localtime=True)
        email.set_content(message.body)

        smtp = aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            timeout=self.timeout,
            # Implicit TLS on 465, STARTTLS elsewhere
            use_tls=self.use_tls and self.port == 465,
            start_tls=self.use_tls and self.port != 465,
        )
        await smtp.connect()
        try:
            if self.username and self.password:
                await smtp.login(self.username, self.password)
            await smtp.send_message(email)
        finally:
            await smtp.quit()

    def send_verification(self, to: str, link: str) -> None:
        self.send(
            to,
            "Verify your email address",
            "Welcome! Confirm your email address by opening the link below.\n\n"
            f"{link}\n\nThe link expires in 24 hours.",
        )

    def send_password_reset(self, to: str, link: str) -> None:
        self.send(
            to,
            "Reset your password",
            "We received a request to reset your password. Open the link below "
            f"to choose a new one.\n\n{link}\n\nThe link expires in 1 hour. "
            "If you did not ask for this, ignore this email.",
        )
