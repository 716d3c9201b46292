"""Expiration notifier rendering the report and dispatching it by mail."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ....application.exceptions import ConfigError, DeliveryError
from ..entra_id.token_provider import ClientCredentials
from .acs_email import AcsEmailConfig, AcsEmailDeliveryBackend
from .base import BaseDeliveryBackend, MailMessage, split_addresses
from .rendering import render_report
from .smtp import SmtpConfig, SmtpDeliveryBackend

if TYPE_CHECKING:
    from collections.abc import Callable

    from ....domain.entities import NotificationItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MailConfig:
    """
    Mail settings: sender, recipients and exactly one delivery provider.

    ``acs_credentials`` is used to authenticate to ACS when no access key is
    configured.
    """

    from_address: str
    to_addresses: str  # Comma-separated
    smtp: SmtpConfig | None = None
    acs: AcsEmailConfig | None = None
    acs_credentials: ClientCredentials | None = None

    @property
    def recipients(self) -> tuple[str, ...]:
        """Recipient addresses."""
        return split_addresses(self.to_addresses)

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ConfigError: If addresses are missing or the provider is not exactly one.
        """
        if not self.from_address or not self.recipients:
            msg = "Missing required mail configuration: MAIL_TO, MAIL_FROM"
            raise ConfigError(msg)

        if self.smtp is None and self.acs is None:
            msg = "No mail provider configured: set either SMTP_HOST or ACS_ENDPOINT"
            raise ConfigError(msg)
        if self.smtp is not None and self.acs is not None:
            msg = "Ambiguous mail provider: set only one of SMTP_HOST or ACS_ENDPOINT"
            raise ConfigError(msg)

        if self.smtp is not None and not (self.smtp.username and self.smtp.password):
            msg = "Missing required SMTP configuration: SMTP_USERNAME, SMTP_PASSWORD"
            raise ConfigError(msg)
        if self.acs is not None and not self.acs.access_key and self.acs_credentials is None:
            msg = "ACS_KEY not set and no Entra ID credential available for ACS"
            raise ConfigError(msg)


def create_delivery_backend(config: MailConfig) -> BaseDeliveryBackend:
    """Select and build the delivery backend for a validated config."""
    if config.smtp is not None:
        return SmtpDeliveryBackend(config.smtp)

    if config.acs is not None:
        credentials = None if config.acs.access_key else config.acs_credentials
        return AcsEmailDeliveryBackend(config.acs, credentials=credentials)

    msg = "No mail provider configured: set either SMTP_HOST or ACS_ENDPOINT"
    raise ConfigError(msg)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ExpirationNotifier:
    """
    Sends the expiration report through the configured mail backend.

    The backend is chosen once at construction.
    """

    def __init__(
        self,
        config: MailConfig,
        *,
        backend: BaseDeliveryBackend | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """
        Initialize the notifier.

        Args:
            config: Mail configuration, validated here.
            backend: Backend to use instead of the one derived from ``config``.
            clock: Source of the report timestamp.

        Raises:
            ConfigError: If the mail configuration is incomplete or ambiguous.
        """
        config.validate()
        self._config = config
        self._backend = backend or create_delivery_backend(config)
        self._clock = clock

    @property
    def backend(self) -> BaseDeliveryBackend:
        """Selected delivery backend."""
        return self._backend

    def build_message(self, items: list[NotificationItem]) -> MailMessage:
        """Render the report for ``items`` into a message."""
        report = render_report(items, self._clock())
        return MailMessage(
            sender=self._config.from_address,
            recipients=self._config.recipients,
            subject=report.subject,
            html=report.html,
            text=report.text,
        )

    async def notify(self, items: list[NotificationItem]) -> None:
        """
        Send one report covering all ``items``.

        Raises:
            DeliveryError: If the backend fails to deliver.
        """
        if not items:
            logger.info("No notifications to send")
            return

        message = self.build_message(items)
        try:
            await self._backend.send(message)
        except DeliveryError:
            logger.error("Failed to send notification email")
            raise

        logger.info("Successfully sent notification email for %d applications", len(items))

    async def test_connection(self) -> bool:
        """Check the delivery backend is usable."""
        try:
            return await self._backend.test_connection()
        except Exception:
            logger.exception("Mail service connection test failed")
            return False
