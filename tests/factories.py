"""Builders and in-memory fakes shared by the test suite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from credential_watch.domain.entities import CredentialRecord, DirectoryObject, NotificationItem

NOW = datetime(2025, 6, 1, 9, 0, tzinfo=UTC)


def make_record(
    days: float,
    *,
    key_id: str = "key",
    display_name: str | None = "Secret",
    type: str | None = None,  # noqa: A002
    usage: str | None = None,
) -> CredentialRecord:
    """Build a credential record expiring ``days`` after ``NOW``."""
    return CredentialRecord(
        key_id=key_id,
        display_name=display_name,
        end_date_time=NOW + timedelta(days=days),
        type=type,
        usage=usage,
    )


def make_object(
    app_id: str,
    *,
    object_id: str | None = None,
    display_name: str | None = None,
    secrets: tuple[CredentialRecord, ...] = (),
    certificates: tuple[CredentialRecord, ...] = (),
) -> DirectoryObject:
    """Build a directory object with the given credentials."""
    return DirectoryObject(
        id=object_id or f"obj-{app_id}",
        app_id=app_id,
        display_name=display_name or f"App {app_id}",
        password_credentials=secrets,
        key_credentials=certificates,
    )


class FakeDirectoryRepository:
    """In-memory directory repository."""

    def __init__(
        self,
        service_principals: list[DirectoryObject] | None = None,
        applications: list[DirectoryObject] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.service_principals = service_principals or []
        self.applications = applications or []
        self.error = error
        self.calls = 0

    async def list_service_principals(self) -> list[DirectoryObject]:
        self.calls += 1
        if self.error:
            raise self.error
        return self.service_principals

    async def list_applications(self) -> list[DirectoryObject]:
        if self.error:
            raise self.error
        return self.applications


class FakeNotifier:
    """Notifier recording every report it is handed."""

    def __init__(self, error: Exception | None = None, connection_ok: bool = True) -> None:
        self.sent: list[list[NotificationItem]] = []
        self.error = error
        self.connection_ok = connection_ok

    async def notify(self, items: list[NotificationItem]) -> None:
        if self.error:
            raise self.error
        if items:
            self.sent.append(items)

    async def test_connection(self) -> bool:
        return self.connection_ok

