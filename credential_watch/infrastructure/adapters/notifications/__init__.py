"""Notification adapters - Report rendering and mail delivery backends."""

from .acs_email import AcsEmailConfig, AcsEmailDeliveryBackend
from .base import BaseDeliveryBackend, MailMessage
from .notifier import ExpirationNotifier, MailConfig, create_delivery_backend
from .rendering import RenderedReport, render_report
from .smtp import SmtpConfig, SmtpDeliveryBackend

__all__ = [
    "AcsEmailConfig",
    "AcsEmailDeliveryBackend",
    "BaseDeliveryBackend",
    "ExpirationNotifier",
    "MailConfig",
    "MailMessage",
    "RenderedReport",
    "SmtpConfig",
    "SmtpDeliveryBackend",
    "create_delivery_backend",
    "render_report",
]
