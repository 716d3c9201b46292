"""Domain service merging service principals and applications into one view."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..entities import ApplicationView, CertificateCredential, SecretCredential
from ..value_objects import CredentialSource

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from ..entities import DirectoryObject


def reconcile(
    service_principals: Iterable[DirectoryObject],
    applications: Iterable[DirectoryObject],
    now: datetime,
) -> list[ApplicationView]:
    """
    Merge both directory collections into one view per application id.

    Service principals are processed before application registrations, so
    when both contain the same ``app_id`` the view takes its object id and
    display name from the service principal. Credentials from every record
    sharing an ``app_id`` are accumulated on the same view.

    Args:
        service_principals: Service principal records.
        applications: Application registration records.
        now: Instant used to evaluate every credential in this run.

    Returns:
        Views in first-insertion order.
    """
    views: dict[str, ApplicationView] = {}

    _merge(views, service_principals, CredentialSource.SERVICE_PRINCIPAL, now)
    _merge(views, applications, CredentialSource.APPLICATION, now)

    return list(views.values())


def _merge(
    views: dict[str, ApplicationView],
    records: Iterable[DirectoryObject],
    source: CredentialSource,
    now: datetime,
) -> None:
    for record in records:
        view = views.get(record.app_id)
        if view is None:
            view = ApplicationView(id=record.id, app_id=record.app_id, display_name=record.display_name)
            views[record.app_id] = view

        view.add_secrets([SecretCredential.from_record(r, source, now) for r in record.password_credentials])
        view.add_certificates([CertificateCredential.from_record(r, source, now) for r in record.key_credentials])
