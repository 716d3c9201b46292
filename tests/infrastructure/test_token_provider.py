"""Tests for the client-credentials token provider."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from credential_watch.application.exceptions import AuthError
from credential_watch.infrastructure.adapters.entra_id import token_provider as token_module
from credential_watch.infrastructure.adapters.entra_id.token_provider import (
    AccessToken,
    ClientCredentials,
    TokenProvider,
)

CREDENTIALS = ClientCredentials(tenant_id="tenant", client_id="client", client_secret="secret")


class FakeMsalApp:
    """Stand-in for msal.ConfidentialClientApplication."""

    def __init__(self, responses: list[dict[str, Any] | Exception]) -> None:
        self.responses = responses
        self.calls: list[list[str]] = []

    def acquire_token_for_client(self, scopes: list[str]) -> dict[str, Any]:
        self.calls.append(scopes)
        response = self.responses[min(len(self.calls), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def install_msal(monkeypatch: pytest.MonkeyPatch):
    """Install a fake MSAL application and return it."""

    def install(*responses: dict[str, Any] | Exception) -> FakeMsalApp:
        app = FakeMsalApp(list(responses))
        created: dict[str, Any] = {}

        def factory(**kwargs: Any) -> FakeMsalApp:
            created.update(kwargs)
            return app

        monkeypatch.setattr(token_module.msal, "ConfidentialClientApplication", factory)
        app.created = created  # type: ignore[attr-defined]
        return app

    return install


class TestAccessToken:
    """Tests for AccessToken."""

    def test_valid_before_margin(self) -> None:
        """A token is usable until the safety margin before expiry."""
        now = datetime(2025, 1, 1, tzinfo=UTC)
        token = AccessToken("t", now + timedelta(seconds=120))

        assert token.is_valid(now, timedelta(seconds=60)) is True
        assert token.is_valid(now + timedelta(seconds=60), timedelta(seconds=60)) is False


class TestTokenProvider:
    """Tests for TokenProvider."""

    @pytest.mark.asyncio
    async def test_acquires_token(self, install_msal) -> None:
        """The exchange uses the tenant authority and requested scope."""
        app = install_msal({"access_token": "abc", "expires_in": 3600})
        provider = TokenProvider(CREDENTIALS)

        token = await provider.get_token()

        assert token.value == "abc"
        assert token.expires_on > datetime.now(UTC) + timedelta(minutes=59)
        assert app.calls == [["https://graph.microsoft.com/.default"]]
        assert app.created["authority"] == "https://login.microsoftonline.com/tenant"
        assert app.created["client_id"] == "client"

    @pytest.mark.asyncio
    async def test_caches_valid_token(self, install_msal) -> None:
        """A cached token is reused until it nears expiry."""
        app = install_msal({"access_token": "abc", "expires_in": 3600})
        provider = TokenProvider(CREDENTIALS)

        await provider.get_token()
        await provider.get_token()

        assert len(app.calls) == 1

    @pytest.mark.asyncio
    async def test_refreshes_inside_margin(self, install_msal) -> None:
        """A token expiring within the margin is replaced."""
        app = install_msal(
            {"access_token": "short", "expires_in": 30},
            {"access_token": "fresh", "expires_in": 3600},
        )
        provider = TokenProvider(CREDENTIALS, safety_margin=timedelta(seconds=60))

        first = await provider.get_token()
        second = await provider.get_token()

        assert first.value == "short"
        assert second.value == "fresh"
        assert len(app.calls) == 2

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_exchange(self, install_msal) -> None:
        """Concurrent refreshes collapse into a single exchange."""
        app = install_msal({"access_token": "abc", "expires_in": 3600})
        provider = TokenProvider(CREDENTIALS)

        tokens = await asyncio.gather(*(provider.get_token() for _ in range(5)))

        assert {t.value for t in tokens} == {"abc"}
        assert len(app.calls) == 1

    @pytest.mark.asyncio
    async def test_error_response_raises(self, install_msal) -> None:
        """A response without a token raises AuthError with the description."""
        install_msal({"error": "invalid_client", "error_description": "bad secret"})
        provider = TokenProvider(CREDENTIALS)

        with pytest.raises(AuthError, match="bad secret"):
            await provider.get_token()

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self, install_msal) -> None:
        """Exceptions from MSAL become AuthError."""
        install_msal(ConnectionError("unreachable"))
        provider = TokenProvider(CREDENTIALS)

        with pytest.raises(AuthError, match="unreachable"):
            await provider.get_token()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("expires_in", [None, 0, -5, "soon"])
    async def test_invalid_expiry_raises(self, install_msal, expires_in: object) -> None:
        """A missing or non-positive lifetime is rejected."""
        install_msal({"access_token": "abc", "expires_in": expires_in})
        provider = TokenProvider(CREDENTIALS)

        with pytest.raises(AuthError, match="expires_in"):
            await provider.get_token()
