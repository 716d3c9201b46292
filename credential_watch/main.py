#!/usr/bin/env python3
"""
Entra ID Credential Watch

Composition root and application entry point.
Wires together all layers following hexagonal architecture principles.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import uvicorn

from .application.exceptions import ConfigError
from .application.scheduler import CredentialCheckScheduler
from .application.use_cases import ApplicationInventory, CheckExpiringCredentials
from .infrastructure.adapters import (
    EntraIdDirectoryRepository,
    ExpirationNotifier,
    GraphClient,
    TokenProvider,
)
from .infrastructure.adapters.api import create_app
from .infrastructure.config import Settings, load_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Application version
__version__ = "1.0.0"


class ApplicationContainer:
    """
    Dependency injection container.

    Builds each component once and shares it between the run modes.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize container with settings."""
        self._settings = settings

        self.token_provider = TokenProvider(
            settings.client_credentials,
            safety_margin=settings.token_safety_margin,
        )
        self.graph_client = GraphClient(settings.graph_config, self.token_provider)
        self.repository = EntraIdDirectoryRepository(self.graph_client)
        self.inventory = ApplicationInventory(self.repository)
        self.notifier = ExpirationNotifier(settings.mail_config)
        logger.info("Mail backend: %s", self.notifier.backend.__class__.__name__)

        self.check = CheckExpiringCredentials(
            inventory=self.inventory,
            notifier=self.notifier,
            thresholds=settings.thresholds,
            dry_run=settings.dry_run,
        )
        self.scheduler = CredentialCheckScheduler(
            self.check,
            self.inventory,
            self.notifier,
            cron_schedule=settings.cron_schedule,
            timezone=settings.schedule_timezone,
            run_on_start=settings.run_on_startup,
        )


class Application:
    """
    Main application orchestrator.

    Handles run modes (single execution, scheduled, or API) and lifecycle.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize application with settings."""
        self._settings = settings
        self._container = ApplicationContainer(settings)

    async def run_once(self) -> int:
        """Execute a single credential check."""
        outcome = await self._container.scheduler.run_immediate_check()
        return 0 if outcome.success else 1

    async def run_scheduled(self) -> None:
        """Run the cron loop until cancelled."""
        scheduler = self._container.scheduler
        logger.info("Starting scheduled mode with cron: %s", self._settings.cron_schedule)
        logger.info("First check scheduled for %s", scheduler.next_run_at().isoformat())
        try:
            await scheduler.run_forever()
        finally:
            scheduler.stop()

    async def run_api(self) -> None:
        """Run in API server mode; the app lifespan drives the scheduler."""
        logger.info(
            "Starting API server on %s:%d",
            self._settings.api_host,
            self._settings.api_port,
        )

        app = create_app(
            self._container.scheduler,
            self._container.inventory,
            dashboard=self._settings.dashboard_config,
            version=__version__,
        )
        config = uvicorn.Config(
            app,
            host=self._settings.api_host,
            port=self._settings.api_port,
            log_level=self._settings.log_level.lower(),
        )
        await uvicorn.Server(config).serve()

    async def test_services(self) -> bool:
        """Run the startup service test, reporting failure instead of raising."""
        try:
            result = await self._container.scheduler.test_services()
        except Exception:
            logger.exception("Service test failed")
            return False

        logger.info(
            "Service test passed: %d applications found, mail connection %s",
            result.applications_found,
            "ok" if result.mail_connection_ok else "failed",
        )
        return True

    async def run(self) -> int:
        """
        Run the application based on configured mode.

        Returns:
            Exit code (0 for success, 1 for failure).
        """
        mode = self._settings.run_mode.lower()

        if mode == "once":
            logger.info("Running in single-execution mode")
            return await self.run_once()

        if self._settings.startup_service_test and not await self.test_services():
            return 1

        match mode:
            case "scheduled":
                await self.run_scheduled()
            case _:
                await self.run_api()
        return 0


async def async_main() -> int:
    """Async entry point."""
    try:
        logger.info("Entra ID Credential Watch starting...")

        settings = load_settings()
        logging.getLogger().setLevel(settings.log_level.upper())

        app = Application(settings)
        return await app.run()

    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        return 0
    except Exception:
        logger.exception("Unexpected error")
        return 1


def main() -> None:
    """Main entry point."""
    try:
        exit_code = asyncio.run(async_main())
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
