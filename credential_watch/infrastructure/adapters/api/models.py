"""API response models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Literal, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from ....domain.entities import ApplicationView, CertificateCredential, SecretCredential


class ApiModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(ApiModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"]
    version: str
    timestamp: datetime
    scheduler: Literal["idle", "running"]


class SecretModel(ApiModel):
    """Client secret with its evaluated expiration."""

    key_id: str
    display_name: str | None = None
    end_date_time: datetime
    days_until_expiration: int
    is_expired: bool
    source: Literal["servicePrincipal", "application"]

    @classmethod
    def from_domain(cls, secret: SecretCredential) -> Self:
        """Convert a domain secret."""
        return cls(
            key_id=secret.key_id,
            display_name=secret.display_name,
            end_date_time=secret.end_date_time,
            days_until_expiration=secret.days_until_expiration,
            is_expired=secret.is_expired,
            source=secret.source.value,
        )


class CertificateModel(SecretModel):
    """Certificate with its evaluated expiration and key metadata."""

    type: str | None = None
    usage: str | None = None

    @classmethod
    def from_domain(cls, certificate: CertificateCredential) -> Self:  # type: ignore[override]
        """Convert a domain certificate."""
        return cls(
            key_id=certificate.key_id,
            display_name=certificate.display_name,
            end_date_time=certificate.end_date_time,
            days_until_expiration=certificate.days_until_expiration,
            is_expired=certificate.is_expired,
            source=certificate.source.value,
            type=certificate.type,
            usage=certificate.usage,
        )


class ApplicationModel(ApiModel):
    """Application with all of its secrets and certificates."""

    id: str
    app_id: str
    display_name: str
    secrets: list[SecretModel]
    certificates: list[CertificateModel]

    @classmethod
    def from_domain(cls, application: ApplicationView) -> Self:
        """Convert a domain application view."""
        return cls(
            id=application.id,
            app_id=application.app_id,
            display_name=application.display_name,
            secrets=[SecretModel.from_domain(s) for s in application.secrets],
            certificates=[CertificateModel.from_domain(c) for c in application.certificates],
        )


class ApplicationsResponse(ApiModel):
    """Reconciled applications."""

    success: bool = True
    count: int
    data: list[ApplicationModel]


class ExpiringApplicationsResponse(ApplicationsResponse):
    """Applications with credentials matching the requested thresholds."""

    thresholds: list[int] = Field(description="Day counts that were matched, descending")


class CheckResponse(ApiModel):
    """Response from triggering a check."""

    success: bool
    message: str
    applications_flagged: int = 0
    notification_sent: bool = False
    dry_run: bool = False


class ServiceTestResponse(ApiModel):
    """Response from testing the directory and mail services."""

    success: bool
    message: str
    applications_found: int
    mail_connection: bool


class ConfigurationResponse(ApiModel):
    """Settings the dashboard needs to sign users in."""

    tenant_id: str
    client_id: str
    redirect_uri: str | None = None
    authority: str | None = None
    scopes: str | None = None
    api_audience: str | None = None


class ErrorResponse(ApiModel):
    """Error response."""

    error: str
    detail: str | None = None
