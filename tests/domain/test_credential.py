"""Tests for credential entities and day counting."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from credential_watch.domain.entities import CertificateCredential, SecretCredential, days_until
from credential_watch.domain.value_objects import CredentialSource, CredentialType
from tests.factories import NOW, make_record


class TestDaysUntil:
    """Tests for the days_until helper."""

    def test_partial_day_rounds_up(self) -> None:
        """Twelve hours left counts as one day."""
        assert days_until(NOW + timedelta(hours=12), NOW) == 1

    def test_exact_instant_is_zero(self) -> None:
        """A credential expiring exactly now has zero days left."""
        assert days_until(NOW, NOW) == 0

    def test_whole_days(self) -> None:
        """Whole days are returned unchanged."""
        assert days_until(NOW + timedelta(days=5), NOW) == 5

    def test_past_partial_day_rounds_toward_zero(self) -> None:
        """Expired by twelve hours still reports zero days."""
        assert days_until(NOW - timedelta(hours=12), NOW) == 0

    def test_past_days_are_negative(self) -> None:
        """Expired by three days reports minus three."""
        assert days_until(NOW - timedelta(days=3), NOW) == -3

    def test_naive_datetimes_are_utc(self) -> None:
        """Naive datetimes are treated as UTC."""
        naive_now = datetime(2025, 6, 1, 9, 0)  # noqa: DTZ001
        assert days_until(NOW + timedelta(days=2), naive_now) == 2


class TestSecretCredential:
    """Tests for SecretCredential."""

    def test_from_record(self) -> None:
        """Secrets are evaluated against the given instant."""
        secret = SecretCredential.from_record(
            make_record(3, key_id="k1", display_name="Deploy"),
            CredentialSource.APPLICATION,
            NOW,
        )
        assert secret.key_id == "k1"
        assert secret.display_name == "Deploy"
        assert secret.days_until_expiration == 3
        assert secret.source == CredentialSource.APPLICATION
        assert secret.credential_type == CredentialType.SECRET
        assert secret.is_expired is False

    @pytest.mark.parametrize(("days", "expired"), [(1, False), (0, True), (-10, True)])
    def test_is_expired_matches_days(self, days: int, expired: bool) -> None:
        """A credential is expired exactly when no whole day is left."""
        secret = SecretCredential.from_record(make_record(days), CredentialSource.SERVICE_PRINCIPAL, NOW)
        assert secret.is_expired is expired

    def test_is_frozen(self) -> None:
        """Credentials are immutable."""
        secret = SecretCredential.from_record(make_record(3), CredentialSource.APPLICATION, NOW)
        with pytest.raises(AttributeError):
            secret.days_until_expiration = 10  # type: ignore[misc]


class TestCertificateCredential:
    """Tests for CertificateCredential."""

    def test_carries_key_metadata(self) -> None:
        """Certificates keep type and usage."""
        cert = CertificateCredential.from_record(
            make_record(10, type="AsymmetricX509Cert", usage="Verify"),
            CredentialSource.SERVICE_PRINCIPAL,
            NOW,
        )
        assert cert.credential_type == CredentialType.CERTIFICATE
        assert cert.type == "AsymmetricX509Cert"
        assert cert.usage == "Verify"
        assert cert.end_date_time == datetime(2025, 6, 11, 9, 0, tzinfo=UTC)
