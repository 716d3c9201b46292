"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Annotated

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.responses import JSONResponse

from ....domain.value_objects import NotificationThresholds
from .models import (
    ApplicationModel,
    ApplicationsResponse,
    CheckResponse,
    ConfigurationResponse,
    ErrorResponse,
    ExpiringApplicationsResponse,
    HealthResponse,
    ServiceTestResponse,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from ....application.scheduler import CredentialCheckScheduler
    from ....application.use_cases import ApplicationInventory

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DashboardConfig:
    """Sign-in settings served to the dashboard."""

    tenant_id: str = ""
    client_id: str = ""
    redirect_uri: str | None = None
    authority: str | None = None
    scopes: str | None = None
    api_audience: str | None = None


def create_app(
    scheduler: CredentialCheckScheduler,
    inventory: ApplicationInventory,
    *,
    dashboard: DashboardConfig | None = None,
    version: str = "1.0.0",
    manage_scheduler: bool = True,
) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        scheduler: Scheduler owning manual and cron-driven checks.
        inventory: Reconciled application inventory.
        dashboard: Sign-in settings served at ``/configuration``.
        version: Application version string.
        manage_scheduler: Start and stop the cron loop with the app lifespan.

    Returns:
        Configured FastAPI application.
    """
    dashboard_config = dashboard or DashboardConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:  # noqa: ARG001
        """Application lifespan handler."""
        logger.info("API server starting...")
        if manage_scheduler:
            scheduler.start()
        yield
        logger.info("API server shutting down...")
        if manage_scheduler:
            scheduler.stop()
            await scheduler.wait_closed()

    app = FastAPI(
        title="Entra ID Credential Watch API",
        description="Monitor Entra ID application secrets and certificates for expiration. "
        "Lists reconciled applications, filters them by expiration thresholds and "
        "triggers on-demand checks.",
        version=version,
        lifespan=lifespan,
        responses={
            500: {"model": ErrorResponse, "description": "Internal server error"},
        },
    )

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="Health check",
        description="Check if the service is running. Has no side effects.",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            version=version,
            timestamp=datetime.now(UTC),
            scheduler=scheduler.state.value,
        )

    @app.get(
        "/applications",
        response_model=ApplicationsResponse,
        tags=["Applications"],
        summary="List applications",
        description="All applications with their secrets and certificates, regardless of expiration.",
    )
    async def list_applications() -> ApplicationsResponse:
        try:
            applications = await inventory.get_all_applications()
        except Exception as e:
            logger.exception("Error fetching applications")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to fetch applications: {e}",
            ) from e

        return ApplicationsResponse(
            count=len(applications),
            data=[ApplicationModel.from_domain(app) for app in applications],
        )

    @app.get(
        "/applications/expiring",
        response_model=ExpiringApplicationsResponse,
        tags=["Applications"],
        summary="List expiring applications",
        description="Applications with credentials that are expired or exactly at one of the "
        "requested day thresholds. Only the matching credentials are returned.",
    )
    async def list_expiring_applications(
        days: Annotated[
            str | None,
            Query(description="Comma-separated day thresholds, e.g. 30,7,1"),
        ] = None,
    ) -> ExpiringApplicationsResponse:
        thresholds = NotificationThresholds.parse(days)
        try:
            applications = await inventory.get_expiring_applications(thresholds)
        except Exception as e:
            logger.exception("Error fetching expiring applications")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to fetch expiring applications: {e}",
            ) from e

        return ExpiringApplicationsResponse(
            count=len(applications),
            thresholds=thresholds.sorted_days(),
            data=[ApplicationModel.from_domain(app) for app in applications],
        )

    @app.post(
        "/check-now",
        response_model=CheckResponse,
        tags=["Operations"],
        summary="Trigger credential check",
        description="Run the expiration check now and send a notification if anything is flagged.",
        responses={
            409: {"model": ErrorResponse, "description": "A check is already running"},
        },
    )
    async def check_now() -> CheckResponse:
        logger.info("API: Triggering credential check...")
        outcome = await scheduler.run_immediate_check()

        if outcome.skipped:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A credential check is already running",
            )
        if not outcome.success or outcome.result is None:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to run immediate check: {outcome.error}",
            )

        result = outcome.result
        return CheckResponse(
            success=True,
            message="Secret expiration check completed",
            applications_flagged=result.applications_flagged,
            notification_sent=result.notification_sent,
            dry_run=result.dry_run,
        )

    @app.get(
        "/test-services",
        response_model=ServiceTestResponse,
        tags=["Operations"],
        summary="Test services",
        description="Read the directory and test the mail backend connection.",
    )
    async def test_services() -> ServiceTestResponse:
        try:
            result = await scheduler.test_services()
        except Exception as e:
            logger.exception("Error testing services")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Service test failed: {e}",
            ) from e

        return ServiceTestResponse(
            success=True,
            message="All services tested successfully",
            applications_found=result.applications_found,
            mail_connection=result.mail_connection_ok,
        )

    @app.get(
        "/configuration",
        response_model=ConfigurationResponse,
        tags=["Dashboard"],
        summary="Dashboard configuration",
        description="Sign-in settings for the dashboard.",
    )
    async def get_configuration() -> ConfigurationResponse:
        return ConfigurationResponse(
            tenant_id=dashboard_config.tenant_id,
            client_id=dashboard_config.client_id,
            redirect_uri=dashboard_config.redirect_uri,
            authority=dashboard_config.authority,
            scopes=dashboard_config.scopes,
            api_audience=dashboard_config.api_audience,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc: Exception) -> JSONResponse:  # noqa: ARG001
        """Handle uncaught exceptions."""
        logger.exception("Unhandled exception in API")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "detail": str(exc)},
        )

    return app
