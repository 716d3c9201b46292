"""Directory objects as read from the identity provider."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class CredentialRecord:
    """A password or key credential before it is evaluated against a clock."""

    key_id: str
    display_name: str | None
    end_date_time: datetime
    type: str | None = None  # key credentials only
    usage: str | None = None  # key credentials only


@dataclass(frozen=True, slots=True)
class DirectoryObject:
    """A service principal or application registration."""

    id: str
    app_id: str
    display_name: str
    password_credentials: tuple[CredentialRecord, ...] = ()
    key_credentials: tuple[CredentialRecord, ...] = ()
