"""Use case for checking and reporting expiring credentials."""

import logging
from dataclasses import dataclass

from ...domain.entities import NotificationItem
from ...domain.value_objects import NotificationThresholds
from ..ports import Notifier
from .list_applications import ApplicationInventory

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Result of the credential check use case."""

    applications_flagged: int
    expired_applications: int
    notification_sent: bool
    dry_run: bool

    @property
    def expiring_applications(self) -> int:
        """Flagged applications with nothing expired yet."""
        return self.applications_flagged - self.expired_applications


class CheckExpiringCredentials:
    """
    Use case for checking expiring credentials and sending notifications.

    Reconciles the directory, filters by thresholds and hands the flagged
    applications to the notifier. Errors propagate to the caller.
    """

    def __init__(
        self,
        inventory: ApplicationInventory,
        notifier: Notifier,
        thresholds: NotificationThresholds | None = None,
        *,
        dry_run: bool = False,
    ) -> None:
        """
        Initialize the use case.

        Args:
            inventory: Reconciled view of the directory.
            notifier: Adapter delivering the report.
            thresholds: Day counts to report at; defaults when omitted.
            dry_run: If True, log the report instead of sending it.
        """
        self._inventory = inventory
        self._notifier = notifier
        self._thresholds = thresholds if thresholds is not None else NotificationThresholds.default()
        self._dry_run = dry_run

    @property
    def thresholds(self) -> NotificationThresholds:
        """Thresholds applied on each run."""
        return self._thresholds

    async def execute(self) -> CheckResult:
        """
        Execute the credential check use case.

        Returns:
            CheckResult describing what was flagged and whether it was sent.

        Raises:
            AuthError, DirectoryError: If the directory cannot be read.
            DeliveryError: If the notification cannot be delivered.
        """
        logger.info("Starting credential expiration check...")

        flagged = await self._inventory.get_expiring_applications(self._thresholds)
        items = [NotificationItem.from_application(app) for app in flagged]
        items = [item for item in items if item.credentials]

        if not items:
            logger.info("No applications with expiring or expired credentials found")
            return CheckResult(
                applications_flagged=0,
                expired_applications=0,
                notification_sent=False,
                dry_run=self._dry_run,
            )

        expired = sum(1 for item in items if item.has_expired)
        logger.info("Found %d applications with expiring or expired credentials", len(items))

        sent = False
        if self._dry_run:
            self._log_dry_run(items)
        else:
            await self._notifier.notify(items)
            sent = True
            logger.info("Sent notification for %d applications", len(items))

        logger.info(
            "Summary: %d apps with expired credentials, %d apps with credentials expiring soon",
            expired,
            len(items) - expired,
        )

        return CheckResult(
            applications_flagged=len(items),
            expired_applications=expired,
            notification_sent=sent,
            dry_run=self._dry_run,
        )

    def _log_dry_run(self, items: list[NotificationItem]) -> None:
        """Log report details in dry run mode."""
        logger.info("DRY RUN: Would send notification for %d applications", len(items))
        for item in items:
            for credential in item.credentials:
                status = "EXPIRED" if credential.is_expired else f"{credential.days_until_expiration}d"
                logger.info(
                    "  %s (%s) - %s '%s': %s",
                    item.app_name,
                    item.app_id,
                    credential.credential_type,
                    credential.display_name or "Unnamed",
                    status,
                )
