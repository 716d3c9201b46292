"""Mail delivery via Azure Communication Services email."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from azure.communication.email.aio import EmailClient
from azure.core.exceptions import AzureError
from azure.identity.aio import ClientSecretCredential

from ....application.exceptions import ConfigError, DeliveryError
from .base import BaseDeliveryBackend, MailMessage

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from ..entra_id.token_provider import ClientCredentials


@dataclass(frozen=True, slots=True)
class AcsEmailConfig:
    """Azure Communication Services email configuration."""

    endpoint: str
    access_key: str = ""  # Empty: authenticate with Entra ID client credentials instead
    poll_interval: float = 2.0
    poll_timeout: float = 300.0


class AcsEmailDeliveryBackend(BaseDeliveryBackend):
    """
    Send the report as a long-running ACS email operation.

    The SDK poller waits ``poll_interval`` between status checks unless the
    service sends a non-zero ``Retry-After``. The whole wait is bounded by
    ``poll_timeout`` seconds.
    """

    MIN_POLL_INTERVAL: ClassVar[float] = 1.0
    SUCCEEDED: ClassVar[str] = "Succeeded"

    def __init__(
        self,
        config: AcsEmailConfig,
        *,
        credentials: ClientCredentials | None = None,
    ) -> None:
        """
        Initialize the ACS backend.

        Args:
            config: ACS endpoint and polling settings.
            credentials: Entra ID app registration, required without an access key.

        Raises:
            ConfigError: If neither an access key nor credentials are given.
        """
        super().__init__()
        if not config.access_key and credentials is None:
            msg = "ACS email requires an access key or an Entra ID credential"
            raise ConfigError(msg)

        self._config = config
        self._credentials = credentials

    @property
    def polling_interval(self) -> float:
        """Seconds between status checks, never below ``MIN_POLL_INTERVAL``."""
        return max(self._config.poll_interval, self.MIN_POLL_INTERVAL)

    async def send(self, message: MailMessage) -> None:
        """Start the send operation and wait for it to finish."""
        try:
            async with self._open_client() as client:
                poller = await client.begin_send(
                    self._build_payload(message),
                    polling_interval=self.polling_interval,
                )
                result = await asyncio.wait_for(poller.result(), timeout=self._config.poll_timeout)
        except TimeoutError as e:
            msg = f"ACS email operation did not complete within {self._config.poll_timeout:g}s"
            raise DeliveryError(msg, reason="timeout") from e
        except AzureError as e:
            self._logger.exception("Failed to send email via ACS")
            msg = f"ACS email delivery failed: {e}"
            raise DeliveryError(msg) from e

        status = (result or {}).get("status")
        if status != self.SUCCEEDED:
            error = (result or {}).get("error") or {}
            msg = f"ACS email operation {status or 'unknown'}: {error.get('message', 'no details')}"
            raise DeliveryError(msg)

        self._logger.info("ACS email sent to %s (operation %s)", ", ".join(message.recipients), result.get("id"))

    async def test_connection(self) -> bool:
        """ACS has no cheap liveness check; construction already succeeded."""
        self._logger.info("ACS client initialized successfully")
        return True

    @asynccontextmanager
    async def _open_client(self) -> AsyncIterator[EmailClient]:
        """Open an email client authenticated by access key or Entra ID."""
        if self._config.access_key:
            connection_string = f"endpoint={self._config.endpoint};accesskey={self._config.access_key}"
            async with EmailClient.from_connection_string(connection_string) as client:
                yield client
            return

        if self._credentials is None:
            msg = "ACS email requires an access key or an Entra ID credential"
            raise ConfigError(msg)

        credential = ClientSecretCredential(
            tenant_id=self._credentials.tenant_id,
            client_id=self._credentials.client_id,
            client_secret=self._credentials.client_secret,
        )
        async with credential, EmailClient(self._config.endpoint, credential) as client:
            yield client

    @staticmethod
    def _build_payload(message: MailMessage) -> dict[str, Any]:
        """Build the ACS email message."""
        return {
            "senderAddress": message.sender,
            "content": {
                "subject": message.subject,
                "plainText": message.text,
                "html": message.html,
            },
            "recipients": {
                "to": [{"address": addr} for addr in message.recipients],
            },
        }
