"""Microsoft Graph API client for Entra ID."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

import httpx

from ....application.exceptions import DirectoryError

if TYPE_CHECKING:
    from .token_provider import TokenProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GraphClientConfig:
    """Configuration for Microsoft Graph API client."""

    timeout: float = 30.0
    base_url: str = "https://graph.microsoft.com/v1.0"


class GraphClient:
    """
    Async client for Microsoft Graph API.

    Handles authenticated, paginated requests to the Graph API.
    """

    SELECT_FIELDS: ClassVar[tuple[str, ...]] = (
        "id",
        "appId",
        "displayName",
        "passwordCredentials",
        "keyCredentials",
    )

    def __init__(
        self,
        config: GraphClientConfig,
        token_provider: TokenProvider,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the Graph client.

        Args:
            config: Client configuration.
            token_provider: Source of bearer tokens for Graph.
            transport: Optional httpx transport, used by tests.
        """
        self._config = config
        self._token_provider = token_provider
        self._transport = transport

    async def list_service_principals(self) -> list[dict[str, Any]]:
        """
        Retrieve all service principals.

        Returns:
            List of service principal dictionaries from Graph API.
        """
        logger.info("Fetching service principals from Entra ID...")
        service_principals = await self._get_all_pages(self._select_url("/servicePrincipals"))
        logger.info("Found %d service principals", len(service_principals))
        return service_principals

    async def list_applications(self) -> list[dict[str, Any]]:
        """
        Retrieve all application registrations.

        Returns:
            List of application dictionaries from Graph API.
        """
        logger.info("Fetching application registrations from Entra ID...")
        applications = await self._get_all_pages(self._select_url("/applications"))
        logger.info("Found %d application registrations", len(applications))
        return applications

    def _select_url(self, endpoint: str) -> str:
        return f"{self._config.base_url}{endpoint}?$select={','.join(self.SELECT_FIELDS)}"

    async def _get_all_pages(self, url: str) -> list[dict[str, Any]]:
        """
        Retrieve all pages from a paginated Graph API endpoint.

        Args:
            url: Absolute URL of the first page.

        Returns:
            Combined list of all results across pages.

        Raises:
            AuthError: If a token cannot be acquired.
            DirectoryError: If any page fails; no partial result is returned.
        """
        results: list[dict[str, Any]] = []
        next_url: str | None = url

        async with httpx.AsyncClient(timeout=self._config.timeout, transport=self._transport) as client:
            while next_url:
                data = await self._get_page(client, next_url)
                results.extend(data.get("value") or [])
                next_url = data.get("@odata.nextLink")

        return results

    async def _get_page(self, client: httpx.AsyncClient, url: str) -> dict[str, Any]:
        token = await self._token_provider.get_token()
        headers = {
            "Authorization": f"Bearer {token.value}",
            "Content-Type": "application/json",
        }

        try:
            response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Graph API request to %s failed: %s", url, e)
            raise DirectoryError(None, url, str(e)) from e

        if not response.is_success:
            logger.error("Graph API request to %s returned %d", url, response.status_code)
            raise DirectoryError(response.status_code, url)

        try:
            data = response.json()
        except ValueError as e:
            raise DirectoryError(response.status_code, url, "malformed JSON payload") from e

        if not isinstance(data, dict):
            raise DirectoryError(response.status_code, url, "unexpected payload shape")
        return data
