"""Tests for the credential check scheduler."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from credential_watch.application.exceptions import ConfigError, DirectoryError
from credential_watch.application.scheduler import (
    CredentialCheckScheduler,
    RunTrigger,
    SchedulerState,
)
from credential_watch.application.use_cases import ApplicationInventory, CheckResult
from tests.factories import NOW, FakeDirectoryRepository, FakeNotifier

RESULT = CheckResult(applications_flagged=2, expired_applications=1, notification_sent=True, dry_run=False)


class StubCheck:
    """Check use case that can be held open or made to fail."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.release.set()
        self.runs = 0

    async def execute(self) -> CheckResult:
        self.runs += 1
        self.started.set()
        await self.release.wait()
        if self.error:
            raise self.error
        return RESULT


def _scheduler(
    check: StubCheck,
    repository: FakeDirectoryRepository | None = None,
    notifier: FakeNotifier | None = None,
    **kwargs: object,
) -> CredentialCheckScheduler:
    inventory = ApplicationInventory(repository or FakeDirectoryRepository(), clock=lambda: NOW)
    return CredentialCheckScheduler(check, inventory, notifier or FakeNotifier(), **kwargs)  # type: ignore[arg-type]


class TestSchedulerConfiguration:
    """Tests for scheduler construction."""

    def test_invalid_cron_rejected(self) -> None:
        """A malformed cron expression is a configuration error."""
        with pytest.raises(ConfigError, match="cron"):
            _scheduler(StubCheck(), cron_schedule="not a cron")

    def test_unknown_timezone_rejected(self) -> None:
        """An unknown zone is a configuration error."""
        with pytest.raises(ConfigError, match="time zone"):
            _scheduler(StubCheck(), timezone="Mars/Olympus")

    def test_next_run_uses_schedule_timezone(self) -> None:
        """The daily run fires at 09:00 local time."""
        rome = ZoneInfo("Europe/Rome")
        scheduler = _scheduler(StubCheck())

        next_run = scheduler.next_run_at(datetime(2025, 6, 1, 8, 0, tzinfo=rome))

        assert next_run == datetime(2025, 6, 1, 9, 0, tzinfo=rome)


class TestImmediateCheck:
    """Tests for manual runs."""

    @pytest.mark.asyncio
    async def test_successful_run(self) -> None:
        """A manual run reports the check result."""
        scheduler = _scheduler(StubCheck())

        outcome = await scheduler.run_immediate_check()

        assert outcome.success is True
        assert outcome.trigger == RunTrigger.MANUAL
        assert outcome.result == RESULT
        assert scheduler.last_outcome == outcome
        assert scheduler.state == SchedulerState.IDLE

    @pytest.mark.asyncio
    async def test_errors_are_captured(self) -> None:
        """A failing run is reported, not raised."""
        scheduler = _scheduler(StubCheck(error=DirectoryError(500, "https://graph")))

        outcome = await scheduler.run_immediate_check()

        assert outcome.success is False
        assert outcome.skipped is False
        assert "Directory request failed" in (outcome.error or "")

    @pytest.mark.asyncio
    async def test_overlapping_run_is_skipped(self) -> None:
        """A trigger arriving during a run is skipped."""
        check = StubCheck()
        check.release.clear()
        scheduler = _scheduler(check)

        first = asyncio.create_task(scheduler.run_immediate_check())
        await check.started.wait()
        assert scheduler.state == SchedulerState.RUNNING

        second = await scheduler.run_immediate_check()
        assert second.skipped is True
        assert second.success is False

        check.release.set()
        assert (await first).success is True
        assert check.runs == 1


class TestServiceTest:
    """Tests for the service self-test."""

    @pytest.mark.asyncio
    async def test_reports_counts_and_mail_status(self, fake_repository: FakeDirectoryRepository) -> None:
        """The test reads the directory and checks the mail backend connection."""
        scheduler = _scheduler(StubCheck(), fake_repository, FakeNotifier(connection_ok=False))

        result = await scheduler.test_services()

        assert result.applications_found == 2
        assert result.mail_connection_ok is False

    @pytest.mark.asyncio
    async def test_directory_failure_propagates(self) -> None:
        """Unlike runs, service test failures are raised."""
        repository = FakeDirectoryRepository(error=DirectoryError(401, "https://graph"))
        scheduler = _scheduler(StubCheck(), repository)

        with pytest.raises(DirectoryError):
            await scheduler.test_services()


class TestCronLoop:
    """Tests for starting and stopping the cron loop."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self) -> None:
        """Stopping ends the loop while it waits for the next run."""
        check = StubCheck()
        scheduler = _scheduler(check)

        scheduler.start()
        assert scheduler.is_started is True

        scheduler.stop()
        await asyncio.wait_for(scheduler.wait_closed(), timeout=1)

        assert scheduler.is_started is False
        assert check.runs == 0

    @pytest.mark.asyncio
    async def test_run_on_start(self) -> None:
        """The loop runs once immediately when configured to."""
        check = StubCheck()
        scheduler = _scheduler(check, run_on_start=True)

        scheduler.start()
        await asyncio.wait_for(check.started.wait(), timeout=1)
        scheduler.stop()
        await asyncio.wait_for(scheduler.wait_closed(), timeout=1)

        assert check.runs == 1
        assert scheduler.last_outcome is not None
        assert scheduler.last_outcome.trigger == RunTrigger.SCHEDULED

    @pytest.mark.asyncio
    async def test_failing_runs_keep_loop_alive(self) -> None:
        """A scheduled run that raises does not end the cron loop."""
        check = StubCheck(error=RuntimeError("Graph unavailable"))
        scheduler = _scheduler(check)

        def soon(after: datetime | None = None) -> datetime:
            return datetime.now(ZoneInfo("Europe/Rome")) + timedelta(milliseconds=10)

        with patch.object(scheduler, "next_run_at", side_effect=soon):
            scheduler.start()

            async def three_runs() -> None:
                while check.runs < 3:
                    await asyncio.sleep(0.01)

            await asyncio.wait_for(three_runs(), timeout=2)

            assert scheduler.is_started is True
            assert scheduler.last_outcome is not None
            assert scheduler.last_outcome.error == "Graph unavailable"

            scheduler.stop()
            await asyncio.wait_for(scheduler.wait_closed(), timeout=1)

        assert scheduler.is_started is False
