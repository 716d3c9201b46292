"""Bearer token acquisition for Entra ID protected APIs."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, ClassVar

import msal

from ....application.exceptions import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ClientCredentials:
    """Entra ID app registration used for the client-credentials flow."""

    tenant_id: str
    client_id: str
    client_secret: str


@dataclass(frozen=True, slots=True)
class AccessToken:
    """A bearer token and the instant it stops being accepted."""

    value: str
    expires_on: datetime

    def is_valid(self, now: datetime, safety_margin: timedelta) -> bool:
        """Check if the token can still be used, leaving ``safety_margin`` spare."""
        return now < self.expires_on - safety_margin


class TokenProvider:
    """
    Acquires and caches a token using the OAuth client-credentials flow.

    Refreshes are single-flight: concurrent callers that find the cached
    token stale wait on one exchange instead of each starting their own.
    """

    AUTHORITY_BASE: ClassVar[str] = "https://login.microsoftonline.com"
    GRAPH_SCOPE: ClassVar[str] = "https://graph.microsoft.com/.default"

    def __init__(
        self,
        credentials: ClientCredentials,
        *,
        scope: str = GRAPH_SCOPE,
        safety_margin: timedelta = timedelta(seconds=60),
    ) -> None:
        """
        Initialize the provider.

        Args:
            credentials: App registration to authenticate as.
            scope: Resource scope requested, e.g. ``https://graph.microsoft.com/.default``.
            safety_margin: How long before expiry a token is refreshed.
        """
        self._credentials = credentials
        self._scopes = [scope]
        self._safety_margin = safety_margin
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()
        self._msal_app: msal.ConfidentialClientApplication | None = None

    def _get_msal_app(self) -> msal.ConfidentialClientApplication:
        """Get or create MSAL application instance."""
        if self._msal_app is None:
            authority = f"{self.AUTHORITY_BASE}/{self._credentials.tenant_id}"
            self._msal_app = msal.ConfidentialClientApplication(
                client_id=self._credentials.client_id,
                client_credential=self._credentials.client_secret,
                authority=authority,
            )
        return self._msal_app

    async def get_token(self) -> AccessToken:
        """
        Return a valid token, exchanging credentials if the cache is stale.

        Raises:
            AuthError: If the exchange fails or returns a malformed payload.
        """
        token = self._token
        if token is not None and token.is_valid(datetime.now(UTC), self._safety_margin):
            return token

        async with self._lock:
            # Another caller may have refreshed while we waited
            token = self._token
            if token is not None and token.is_valid(datetime.now(UTC), self._safety_margin):
                return token

            self._token = await self._exchange()
            return self._token

    async def _exchange(self) -> AccessToken:
        """Perform the client-credentials exchange."""
        logger.debug("Acquiring access token for %s", self._scopes[0])
        requested_at = datetime.now(UTC)

        try:
            app = self._get_msal_app()
            result: dict[str, Any] = await asyncio.to_thread(app.acquire_token_for_client, scopes=self._scopes)
        except Exception as e:
            msg = f"Failed to acquire access token: {e}"
            raise AuthError(msg) from e

        if not isinstance(result, dict) or "access_token" not in result:
            error = "Unknown error"
            if isinstance(result, dict):
                error = result.get("error_description", result.get("error", error))
            msg = f"Failed to acquire access token: {error}"
            raise AuthError(msg)

        expires_in = result.get("expires_in")
        if isinstance(expires_in, str) and expires_in.isdigit():
            expires_in = int(expires_in)
        if not isinstance(expires_in, int) or isinstance(expires_in, bool) or expires_in <= 0:
            msg = f"Failed to acquire access token: invalid expires_in {expires_in!r}"
            raise AuthError(msg)

        return AccessToken(
            value=result["access_token"],
            expires_on=requested_at + timedelta(seconds=expires_in),
        )
