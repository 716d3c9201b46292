"""Credential entities representing secrets and certificates."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import ClassVar, Self

from ..value_objects import CredentialSource, CredentialType
from .directory_object import CredentialRecord

SECONDS_PER_DAY = 86_400


def days_until(expiry: datetime, now: datetime) -> int:
    """
    Whole days remaining until ``expiry``, rounded up.

    The difference is measured in fractional days and rounded with ``ceil``,
    so a credential expiring later today reports 1 until its exact instant
    has passed, and one expiring exactly ``now`` reports 0.
    """
    expiry_aware = expiry if expiry.tzinfo else expiry.replace(tzinfo=UTC)
    now_aware = now if now.tzinfo else now.replace(tzinfo=UTC)
    delta = (expiry_aware - now_aware).total_seconds() / SECONDS_PER_DAY
    return math.ceil(delta)


@dataclass(frozen=True, slots=True)
class Credential:
    """A credential belonging to an application, evaluated at a point in time."""

    credential_type: ClassVar[CredentialType]

    key_id: str
    display_name: str | None
    end_date_time: datetime
    days_until_expiration: int
    source: CredentialSource

    @property
    def is_expired(self) -> bool:
        """A credential with no whole day left is expired."""
        return self.days_until_expiration <= 0


@dataclass(frozen=True, slots=True)
class SecretCredential(Credential):
    """A client secret (password credential)."""

    credential_type: ClassVar[CredentialType] = CredentialType.SECRET

    @classmethod
    def from_record(cls, record: CredentialRecord, source: CredentialSource, now: datetime) -> Self:
        """Evaluate a raw password credential against ``now``."""
        return cls(
            key_id=record.key_id,
            display_name=record.display_name,
            end_date_time=record.end_date_time,
            days_until_expiration=days_until(record.end_date_time, now),
            source=source,
        )


@dataclass(frozen=True, slots=True)
class CertificateCredential(Credential):
    """A certificate (key credential) with type and usage metadata."""

    credential_type: ClassVar[CredentialType] = CredentialType.CERTIFICATE

    type: str | None = None
    usage: str | None = None

    @classmethod
    def from_record(cls, record: CredentialRecord, source: CredentialSource, now: datetime) -> Self:
        """Evaluate a raw key credential against ``now``."""
        return cls(
            key_id=record.key_id,
            display_name=record.display_name,
            end_date_time=record.end_date_time,
            days_until_expiration=days_until(record.end_date_time, now),
            source=source,
            type=record.type,
            usage=record.usage,
        )
