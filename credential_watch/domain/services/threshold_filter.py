"""Domain service selecting credentials that hit a notification threshold."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..value_objects import NotificationThresholds

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..entities import ApplicationView, Credential


def filter_by_thresholds(
    applications: Iterable[ApplicationView],
    thresholds: NotificationThresholds | None = None,
) -> list[ApplicationView]:
    """
    Keep applications with at least one credential to report.

    A credential matches when it has expired or its remaining days are one of
    the thresholds. Returned views are copies holding only the matching
    credentials; the input views are left untouched.

    Args:
        applications: Reconciled application views.
        thresholds: Day counts to match. ``None`` selects the defaults.

    Returns:
        Filtered views, possibly empty.
    """
    active = thresholds if thresholds is not None else NotificationThresholds.default()

    def matches(credential: Credential) -> bool:
        return active.matches(credential.days_until_expiration, is_expired=credential.is_expired)

    flagged: list[ApplicationView] = []
    for application in applications:
        selected = application.select(matches)
        if selected.secrets or selected.certificates:
            flagged.append(selected)
    return flagged
