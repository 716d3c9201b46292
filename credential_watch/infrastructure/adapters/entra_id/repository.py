"""Entra ID directory repository implementation."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from ....domain.entities import CredentialRecord, DirectoryObject

if TYPE_CHECKING:
    from .graph_client import GraphClient

logger = logging.getLogger(__name__)


class EntraIdDirectoryRepository:
    """
    Directory repository implementation using Microsoft Graph API.

    Implements the DirectoryRepository port for Entra ID.
    """

    def __init__(self, client: GraphClient) -> None:
        """
        Initialize the repository.

        Args:
            client: Graph API client used for the listings.
        """
        self._client = client

    async def list_service_principals(self) -> list[DirectoryObject]:
        """Retrieve every service principal with its credentials."""
        raw = await self._client.list_service_principals()
        return [self._map_object(item, "service principal") for item in raw]

    async def list_applications(self) -> list[DirectoryObject]:
        """Retrieve every application registration with its credentials."""
        raw = await self._client.list_applications()
        return [self._map_object(item, "application") for item in raw]

    def _map_object(self, raw: dict[str, Any], kind: str) -> DirectoryObject:
        """Map a raw Graph API object to a domain record."""
        display_name = raw.get("displayName") or "Unknown"

        passwords = [
            self._map_credential(cred, kind, display_name, with_metadata=False)
            for cred in raw.get("passwordCredentials") or []
        ]
        keys = [
            self._map_credential(cred, kind, display_name, with_metadata=True)
            for cred in raw.get("keyCredentials") or []
        ]

        return DirectoryObject(
            id=raw.get("id", ""),
            app_id=raw.get("appId", ""),
            display_name=display_name,
            password_credentials=tuple(c for c in passwords if c is not None),
            key_credentials=tuple(c for c in keys if c is not None),
        )

    def _map_credential(
        self,
        raw: dict[str, Any],
        kind: str,
        owner_name: str,
        *,
        with_metadata: bool,
    ) -> CredentialRecord | None:
        """
        Map a raw password or key credential.

        Returns:
            CredentialRecord or None if the expiry date is missing or invalid.
        """
        expiry_str = raw.get("endDateTime")
        if not expiry_str:
            logger.warning(
                "Credential %s in %s %s has no expiry date",
                raw.get("keyId", "unknown"),
                kind,
                owner_name,
            )
            return None

        expiry_date = self._parse_datetime(expiry_str)
        if expiry_date is None:
            return None

        return CredentialRecord(
            key_id=raw.get("keyId", ""),
            display_name=raw.get("displayName"),
            end_date_time=expiry_date,
            type=raw.get("type") if with_metadata else None,
            usage=raw.get("usage") if with_metadata else None,
        )

    @staticmethod
    def _parse_datetime(dt_string: str) -> datetime | None:
        """Parse ISO datetime string to datetime object."""
        try:
            # Graph returns a trailing Z
            dt = datetime.fromisoformat(dt_string.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Failed to parse datetime: %s", dt_string)
            return None
        # Ensure timezone-aware
        return dt if dt.tzinfo else dt.replace(tzinfo=UTC)
