"""API adapter for HTTP endpoints."""

from .app import DashboardConfig, create_app
from .models import (
    ApplicationModel,
    ApplicationsResponse,
    CheckResponse,
    ExpiringApplicationsResponse,
    HealthResponse,
    ServiceTestResponse,
)

__all__ = [
    "ApplicationModel",
    "ApplicationsResponse",
    "CheckResponse",
    "DashboardConfig",
    "ExpiringApplicationsResponse",
    "HealthResponse",
    "ServiceTestResponse",
    "create_app",
]
