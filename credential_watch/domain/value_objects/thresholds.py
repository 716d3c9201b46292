"""Notification thresholds value object."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Self

DEFAULT_THRESHOLD_DAYS: tuple[int, ...] = (15, 10, 5, 4, 3, 2, 1, 0)


@dataclass(frozen=True, slots=True)
class NotificationThresholds:
    """
    Day counts at which a credential is reported.

    A credential is flagged when its remaining days exactly equal one of the
    thresholds, or when it has already expired.
    """

    days: frozenset[int] = field(default_factory=lambda: frozenset(DEFAULT_THRESHOLD_DAYS))

    def __post_init__(self) -> None:
        """Normalize any iterable of ints to a frozenset."""
        object.__setattr__(self, "days", frozenset(int(d) for d in self.days))

    @classmethod
    def default(cls) -> Self:
        """Thresholds used when none are supplied."""
        return cls()

    @classmethod
    def of(cls, days: Iterable[int]) -> Self:
        """Build thresholds from any iterable of day counts."""
        return cls(days=frozenset(days))

    @classmethod
    def parse(cls, raw: str | None) -> Self:
        """
        Parse a comma-separated list such as ``"30,7,1"``.

        Tokens that are not integers are dropped. A missing or blank value
        yields the default thresholds; a value whose tokens are all invalid
        yields an empty set, which only matches expired credentials.
        """
        if raw is None or not raw.strip():
            return cls.default()

        days: set[int] = set()
        for token in raw.split(","):
            try:
                days.add(int(token.strip()))
            except ValueError:
                continue
        return cls(days=frozenset(days))

    def matches(self, days_until_expiration: int, *, is_expired: bool) -> bool:
        """Check whether a credential in this state should be reported."""
        return is_expired or days_until_expiration in self.days

    def sorted_days(self) -> list[int]:
        """Thresholds in descending order."""
        return sorted(self.days, reverse=True)
