"""Domain value objects - Immutable objects defined by their attributes."""

from .credential_source import CredentialSource
from .credential_type import CredentialType
from .thresholds import DEFAULT_THRESHOLD_DAYS, NotificationThresholds

__all__ = [
    "DEFAULT_THRESHOLD_DAYS",
    "CredentialSource",
    "CredentialType",
    "NotificationThresholds",
]
