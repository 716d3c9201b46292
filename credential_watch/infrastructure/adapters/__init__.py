"""Infrastructure adapters - Implementations of application ports."""

from .entra_id import EntraIdDirectoryRepository, GraphClient, TokenProvider
from .notifications import ExpirationNotifier, MailConfig

__all__ = [
    "EntraIdDirectoryRepository",
    "ExpirationNotifier",
    "GraphClient",
    "MailConfig",
    "TokenProvider",
]
