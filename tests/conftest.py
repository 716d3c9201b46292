"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import datetime

import pytest

from tests.factories import NOW, FakeDirectoryRepository, FakeNotifier, make_object, make_record


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation instant."""
    return NOW


@pytest.fixture
def fake_repository() -> FakeDirectoryRepository:
    """Repository with one service principal and one application sharing an app id."""
    return FakeDirectoryRepository(
        service_principals=[
            make_object(
                "app-1",
                object_id="sp-1",
                display_name="Payroll SP",
                secrets=(make_record(5, key_id="sp-secret"),),
            ),
        ],
        applications=[
            make_object(
                "app-1",
                object_id="reg-1",
                display_name="Payroll",
                secrets=(make_record(30, key_id="reg-secret"),),
                certificates=(make_record(-2, key_id="reg-cert", type="AsymmetricX509Cert", usage="Verify"),),
            ),
            make_object("app-2", secrets=(make_record(100, key_id="healthy"),)),
        ],
    )


@pytest.fixture
def fake_notifier() -> FakeNotifier:
    """Notifier that always succeeds."""
    return FakeNotifier()
