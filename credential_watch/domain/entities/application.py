"""Application view aggregating the credentials of one Entra ID application."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .credential import CertificateCredential, Credential, SecretCredential

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(slots=True)
class ApplicationView:
    """
    Per-application view of secrets and certificates.

    Keyed by ``app_id`` (the client id), which is shared by an application
    registration and its service principal. ``id`` is the object id of
    whichever record was seen first.
    """

    id: str
    app_id: str
    display_name: str
    secrets: list[SecretCredential] = field(default_factory=list)
    certificates: list[CertificateCredential] = field(default_factory=list)

    @property
    def credentials(self) -> list[Credential]:
        """Secrets followed by certificates."""
        return [*self.secrets, *self.certificates]

    def add_secrets(self, secrets: list[SecretCredential]) -> None:
        """Append secrets to this view."""
        self.secrets.extend(secrets)

    def add_certificates(self, certificates: list[CertificateCredential]) -> None:
        """Append certificates to this view."""
        self.certificates.extend(certificates)

    def select(self, predicate: Callable[[Credential], bool]) -> ApplicationView:
        """Return a copy carrying only the credentials matching ``predicate``."""
        return replace(
            self,
            secrets=[s for s in self.secrets if predicate(s)],
            certificates=[c for c in self.certificates if predicate(c)],
        )
