"""Use case for building the reconciled application inventory."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ...domain.services import filter_by_thresholds, reconcile

if TYPE_CHECKING:
    from collections.abc import Callable

    from ...domain.entities import ApplicationView
    from ...domain.value_objects import NotificationThresholds
    from ..ports import DirectoryRepository

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ApplicationInventory:
    """
    Reads both directory collections and reconciles them per application.

    Nothing is cached: every call re-reads the directory.
    """

    def __init__(
        self,
        repository: DirectoryRepository,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """
        Initialize the inventory.

        Args:
            repository: Adapter for reading the identity directory.
            clock: Source of the instant credentials are evaluated against.
        """
        self._repository = repository
        self._clock = clock

    async def get_all_applications(self) -> list[ApplicationView]:
        """
        Retrieve every application with all of its credentials.

        Raises:
            AuthError: If the directory token cannot be acquired.
            DirectoryError: If either listing fails.
        """
        logger.info("Fetching service principals and applications...")

        # Independent reads; both must succeed
        service_principals, applications = await asyncio.gather(
            self._repository.list_service_principals(),
            self._repository.list_applications(),
        )
        logger.info(
            "Found %d service principals and %d applications",
            len(service_principals),
            len(applications),
        )

        views = reconcile(service_principals, applications, self._clock())
        logger.info("Processed %d unique applications", len(views))
        return views

    async def get_expiring_applications(
        self, thresholds: NotificationThresholds | None = None
    ) -> list[ApplicationView]:
        """Retrieve applications with credentials that are expired or hit a threshold."""
        applications = await self.get_all_applications()
        return filter_by_thresholds(applications, thresholds)
