"""Application use cases."""

from .check_expiring_credentials import CheckExpiringCredentials, CheckResult
from .list_applications import ApplicationInventory

__all__ = [
    "ApplicationInventory",
    "CheckExpiringCredentials",
    "CheckResult",
]
