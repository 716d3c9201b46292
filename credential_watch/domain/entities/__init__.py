"""Domain entities - Objects with identity and lifecycle."""

from .application import ApplicationView
from .credential import CertificateCredential, Credential, SecretCredential, days_until
from .directory_object import CredentialRecord, DirectoryObject
from .notification import CredentialSummary, NotificationItem

__all__ = [
    "ApplicationView",
    "CertificateCredential",
    "Credential",
    "CredentialRecord",
    "CredentialSummary",
    "DirectoryObject",
    "NotificationItem",
    "SecretCredential",
    "days_until",
]
