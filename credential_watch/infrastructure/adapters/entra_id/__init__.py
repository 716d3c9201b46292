"""Entra ID adapters - Token acquisition and Graph API directory access."""

from .graph_client import GraphClient, GraphClientConfig
from .repository import EntraIdDirectoryRepository
from .token_provider import AccessToken, ClientCredentials, TokenProvider

__all__ = [
    "AccessToken",
    "ClientCredentials",
    "EntraIdDirectoryRepository",
    "GraphClient",
    "GraphClientConfig",
    "TokenProvider",
]
