"""Notification items built from flagged applications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Self

from ..value_objects import CredentialType

if TYPE_CHECKING:
    from .application import ApplicationView
    from .credential import Credential


@dataclass(frozen=True, slots=True)
class CredentialSummary:
    """Flattened credential details used in a notification."""

    credential_type: CredentialType
    display_name: str | None
    end_date_time: datetime
    days_until_expiration: int
    is_expired: bool

    @classmethod
    def from_credential(cls, credential: Credential) -> Self:
        """Summarize a secret or certificate."""
        return cls(
            credential_type=credential.credential_type,
            display_name=credential.display_name,
            end_date_time=credential.end_date_time,
            days_until_expiration=credential.days_until_expiration,
            is_expired=credential.is_expired,
        )


@dataclass(frozen=True, slots=True)
class NotificationItem:
    """One application and the credentials it is being reported for."""

    app_name: str
    app_id: str
    credentials: tuple[CredentialSummary, ...]

    @property
    def has_expired(self) -> bool:
        """Check if any reported credential has already expired."""
        return any(c.is_expired for c in self.credentials)

    @classmethod
    def from_application(cls, application: ApplicationView) -> Self:
        """Build an item listing secrets first, then certificates."""
        return cls(
            app_name=application.display_name,
            app_id=application.app_id,
            credentials=tuple(CredentialSummary.from_credential(c) for c in application.credentials),
        )
