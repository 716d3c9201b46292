"""Scheduler driving the credential check on a cron cadence and on demand."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import StrEnum, auto
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter

from .exceptions import ConfigError

if TYPE_CHECKING:
    from .ports import Notifier
    from .use_cases import ApplicationInventory, CheckExpiringCredentials, CheckResult

logger = logging.getLogger(__name__)


def _resolve_timezone(timezone: str | tzinfo) -> tzinfo:
    if not isinstance(timezone, str):
        return timezone
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        msg = f"Unknown time zone: {timezone!r}"
        raise ConfigError(msg) from e


class SchedulerState(StrEnum):
    """Run state of the scheduler."""

    IDLE = auto()
    RUNNING = auto()


class RunTrigger(StrEnum):
    """What started a run."""

    SCHEDULED = auto()
    MANUAL = auto()


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Outcome of one triggered run. Failures are captured, not raised."""

    trigger: RunTrigger
    started_at: datetime
    finished_at: datetime
    result: CheckResult | None = None
    error: str | None = None
    skipped: bool = False

    @property
    def success(self) -> bool:
        """Check if the run executed and completed without error."""
        return not self.skipped and self.error is None


@dataclass(frozen=True, slots=True)
class ServiceTestResult:
    """Result of testing the directory and mail services."""

    applications_found: int
    mail_connection_ok: bool


class CredentialCheckScheduler:
    """
    Runs the credential check daily and on manual request.

    Only one run executes at a time; a trigger arriving while a run is in
    progress is skipped. Errors raised by a run are logged and reported in
    the returned ``RunOutcome`` so the cron loop keeps going.
    """

    def __init__(
        self,
        check: CheckExpiringCredentials,
        inventory: ApplicationInventory,
        notifier: Notifier,
        *,
        cron_schedule: str = "0 9 * * *",
        timezone: str | tzinfo = "Europe/Rome",
        run_on_start: bool = False,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            check: Use case executed on every run.
            inventory: Used by the service self-test.
            notifier: Used by the service self-test.
            cron_schedule: Five-field cron expression.
            timezone: Time zone the cron expression is evaluated in.
            run_on_start: Run once immediately when the loop starts.

        Raises:
            ConfigError: If the cron expression or time zone is invalid.
        """
        if not croniter.is_valid(cron_schedule):
            msg = f"Invalid cron schedule: {cron_schedule!r}"
            raise ConfigError(msg)

        self._check = check
        self._inventory = inventory
        self._notifier = notifier
        self._cron_schedule = cron_schedule
        self._tz = _resolve_timezone(timezone)
        self._run_on_start = run_on_start

        self._lock = asyncio.Lock()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._last_outcome: RunOutcome | None = None

    @property
    def state(self) -> SchedulerState:
        """Current run state."""
        return SchedulerState.RUNNING if self._lock.locked() else SchedulerState.IDLE

    @property
    def is_started(self) -> bool:
        """Check if the cron loop is active."""
        return self._task is not None and not self._task.done()

    @property
    def last_outcome(self) -> RunOutcome | None:
        """Outcome of the most recent run that was not skipped."""
        return self._last_outcome

    def next_run_at(self, after: datetime | None = None) -> datetime:
        """Next instant the cron expression fires after ``after`` (default now)."""
        start = after or datetime.now(self._tz)
        return croniter(self._cron_schedule, start).get_next(datetime)

    async def run_immediate_check(self) -> RunOutcome:
        """Run the check now, unless a run is already in progress."""
        logger.info("Running immediate secret expiration check...")
        return await self._run(RunTrigger.MANUAL)

    async def test_services(self) -> ServiceTestResult:
        """
        Test the directory and mail services.

        Unlike scheduled runs, failures propagate to the caller.

        Raises:
            AuthError, DirectoryError: If the directory cannot be read.
        """
        logger.info("Testing directory and mail services...")

        logger.info("Testing Graph API connection...")
        applications = await self._inventory.get_all_applications()
        logger.info("Directory service working - found %d applications", len(applications))

        logger.info("Testing mail service connection...")
        mail_ok = await self._notifier.test_connection()
        if mail_ok:
            logger.info("Mail service connection successful")
        else:
            logger.warning("Mail service connection failed")

        return ServiceTestResult(applications_found=len(applications), mail_connection_ok=mail_ok)

    def start(self) -> None:
        """Register the cron loop on the running event loop."""
        if self.is_started:
            logger.warning("Scheduler already started")
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._loop(), name="credential-check-scheduler")
        logger.info(
            "Scheduler started with cron '%s' (%s)",
            self._cron_schedule,
            self._tz,
        )

    def stop(self) -> None:
        """
        Suppress further scheduled runs.

        A run already in progress is allowed to finish.
        """
        logger.info("Stopping scheduled checks...")
        self._stop_event.set()

    async def wait_closed(self) -> None:
        """Wait for the cron loop to exit after ``stop``."""
        if self._task is not None:
            await self._task
            self._task = None

    async def run_forever(self) -> None:
        """Start the cron loop and block until it is stopped."""
        self.start()
        await self.wait_closed()

    async def _loop(self) -> None:
        if self._run_on_start:
            logger.info("Running initial check on startup...")
            await self._run(RunTrigger.SCHEDULED)

        while not self._stop_event.is_set():
            next_run = self.next_run_at()
            delay = (next_run - datetime.now(self._tz)).total_seconds()

            if delay > 0:
                logger.info("Next check scheduled for %s", next_run.isoformat())
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                except TimeoutError:
                    pass
                else:
                    break

            logger.info("Running scheduled check...")
            await self._run(RunTrigger.SCHEDULED)

        logger.info("Scheduler stopped")

    async def _run(self, trigger: RunTrigger) -> RunOutcome:
        started_at = datetime.now(self._tz)

        if self._lock.locked():
            logger.warning("Skipping %s check: a check is already running", trigger)
            return RunOutcome(
                trigger=trigger,
                started_at=started_at,
                finished_at=started_at,
                skipped=True,
            )

        async with self._lock:
            try:
                result = await self._check.execute()
            except Exception as e:
                logger.exception("Error during %s secret expiration check", trigger)
                outcome = RunOutcome(
                    trigger=trigger,
                    started_at=started_at,
                    finished_at=datetime.now(self._tz),
                    error=str(e) or e.__class__.__name__,
                )
            else:
                outcome = RunOutcome(
                    trigger=trigger,
                    started_at=started_at,
                    finished_at=datetime.now(self._tz),
                    result=result,
                )

        self._last_outcome = outcome
        return outcome
