"""Mail delivery over SMTP."""

from __future__ import annotations

import asyncio
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from ....application.exceptions import DeliveryError
from .base import BaseDeliveryBackend, MailMessage

IMPLICIT_TLS_PORT = 465


@dataclass(frozen=True, slots=True)
class SmtpConfig:
    """SMTP server configuration."""

    host: str
    port: int = 587
    username: str = ""
    password: str = ""
    secure: bool = False
    timeout: float = 30.0

    @property
    def implicit_tls(self) -> bool:
        """Whether the session starts in TLS rather than upgrading via STARTTLS."""
        return self.secure or self.port == IMPLICIT_TLS_PORT


class SmtpDeliveryBackend(BaseDeliveryBackend):
    """Send the report via an authenticated SMTP session."""

    def __init__(self, config: SmtpConfig) -> None:
        """Initialize the SMTP backend."""
        super().__init__()
        self._config = config

    async def send(self, message: MailMessage) -> None:
        """Send the message to every recipient."""
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            self._logger.exception("Failed to send email via %s", self._config.host)
            msg = f"SMTP delivery failed: {e}"
            raise DeliveryError(msg) from e

        self._logger.info("Email sent to %s", ", ".join(message.recipients))

    async def test_connection(self) -> bool:
        """Connect, authenticate and issue NOOP."""
        try:
            await asyncio.to_thread(self._verify_sync)
        except (smtplib.SMTPException, OSError):
            self._logger.exception("SMTP connection test failed")
            return False

        self._logger.info("SMTP connection test successful")
        return True

    def _connect(self) -> smtplib.SMTP:
        """Open an authenticated session."""
        if self._config.implicit_tls:
            server: smtplib.SMTP = smtplib.SMTP_SSL(self._config.host, self._config.port, timeout=self._config.timeout)
        else:
            server = smtplib.SMTP(self._config.host, self._config.port, timeout=self._config.timeout)

        try:
            server.ehlo()
            if not self._config.implicit_tls and server.has_extn("starttls"):
                server.starttls()
                server.ehlo()
            if self._config.username and self._config.password:
                server.login(self._config.username, self._config.password)
        except BaseException:
            server.close()
            raise
        return server

    def _send_sync(self, message: MailMessage) -> None:
        with self._connect() as server:
            server.sendmail(message.sender, list(message.recipients), self._build_message(message).as_string())

    def _verify_sync(self) -> None:
        with self._connect() as server:
            server.noop()

    @staticmethod
    def _build_message(message: MailMessage) -> MIMEMultipart:
        """Build the multipart email message."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = message.sender
        msg["To"] = ", ".join(message.recipients)

        msg.attach(MIMEText(message.text, "plain", "utf-8"))
        msg.attach(MIMEText(message.html, "html", "utf-8"))

        return msg
