"""Application settings loaded from environment variables."""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from functools import cached_property
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter

from ...application.exceptions import ConfigError
from ...domain.value_objects import DEFAULT_THRESHOLD_DAYS, NotificationThresholds
from ..adapters.api import DashboardConfig
from ..adapters.entra_id import ClientCredentials, GraphClientConfig
from ..adapters.notifications import AcsEmailConfig, MailConfig, SmtpConfig

RUN_MODES = ("api", "scheduled", "once")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    return os.environ.get(key, str(default)).lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    raw = os.environ.get(key, str(default))
    try:
        return int(raw)
    except ValueError:
        msg = f"{key} must be an integer, got {raw!r}"
        raise ConfigError(msg) from None


def _env_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    raw = os.environ.get(key, str(default))
    try:
        return float(raw)
    except ValueError:
        msg = f"{key} must be a number, got {raw!r}"
        raise ConfigError(msg) from None


def _env_str(key: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


def _env_optional(key: str) -> str | None:
    """Get string from environment variable, None when unset or blank."""
    return os.environ.get(key) or None


@dataclass
class Settings:
    """Application settings container."""

    # Azure/Entra ID
    azure_tenant_id: str = field(default_factory=lambda: _env_str("AZURE_TENANT_ID"))
    azure_client_id: str = field(default_factory=lambda: _env_str("AZURE_CLIENT_ID"))
    azure_client_secret: str = field(default_factory=lambda: _env_str("AZURE_CLIENT_SECRET"))
    token_safety_margin_seconds: int = field(default_factory=lambda: _env_int("TOKEN_SAFETY_MARGIN_SECONDS", 60))
    graph_timeout_seconds: float = field(default_factory=lambda: _env_float("GRAPH_TIMEOUT_SECONDS", 30.0))

    # Mail
    mail_to: str = field(default_factory=lambda: _env_str("MAIL_TO"))
    mail_from: str = field(default_factory=lambda: _env_str("MAIL_FROM"))

    # SMTP settings
    smtp_host: str = field(default_factory=lambda: _env_str("SMTP_HOST"))
    smtp_port: int = field(default_factory=lambda: _env_int("SMTP_PORT", 587))
    smtp_username: str = field(default_factory=lambda: _env_str("SMTP_USERNAME"))
    smtp_password: str = field(default_factory=lambda: _env_str("SMTP_PASSWORD"))
    smtp_secure: bool = field(default_factory=lambda: _env_bool("SMTP_SECURE"))

    # Azure Communication Services email settings
    acs_endpoint: str = field(default_factory=lambda: _env_str("ACS_ENDPOINT"))
    acs_key: str = field(default_factory=lambda: _env_str("ACS_KEY"))
    acs_poll_interval_seconds: float = field(default_factory=lambda: _env_float("ACS_POLL_INTERVAL_SECONDS", 2.0))
    acs_poll_timeout_seconds: float = field(default_factory=lambda: _env_float("ACS_POLL_TIMEOUT_SECONDS", 300.0))

    # Run configuration
    run_mode: str = field(default_factory=lambda: _env_str("RUN_MODE", "api"))
    cron_schedule: str = field(default_factory=lambda: _env_str("CRON_SCHEDULE", "0 9 * * *"))
    schedule_timezone: str = field(default_factory=lambda: _env_str("SCHEDULE_TIMEZONE", "Europe/Rome"))
    run_on_startup: bool = field(default_factory=lambda: _env_bool("RUN_ON_STARTUP"))
    startup_service_test: bool = field(default_factory=lambda: _env_bool("STARTUP_SERVICE_TEST", default=True))
    notification_thresholds: str = field(
        default_factory=lambda: _env_str(
            "NOTIFICATION_THRESHOLDS", ",".join(str(d) for d in DEFAULT_THRESHOLD_DAYS)
        )
    )
    log_level: str = field(default_factory=lambda: _env_str("LOG_LEVEL", "INFO"))
    dry_run: bool = field(default_factory=lambda: _env_bool("DRY_RUN"))

    # API settings
    api_host: str = field(default_factory=lambda: _env_str("API_HOST", "0.0.0.0"))  # noqa: S104
    api_port: int = field(default_factory=lambda: _env_int("API_PORT", 3000))

    # Dashboard sign-in settings
    redirect_uri: str | None = field(default_factory=lambda: _env_optional("REDIRECT_URI"))
    authority: str | None = field(default_factory=lambda: _env_optional("AUTHORITY"))
    scopes: str | None = field(default_factory=lambda: _env_optional("SCOPES"))
    api_audience: str | None = field(default_factory=lambda: _env_optional("API_AUDIENCE"))

    def validate(self) -> None:
        """
        Validate required settings.

        Raises:
            ConfigError: If a setting is missing or invalid.
        """
        missing: list[str] = []

        if not self.azure_tenant_id:
            missing.append("AZURE_TENANT_ID")
        if not self.azure_client_id:
            missing.append("AZURE_CLIENT_ID")
        if not self.azure_client_secret:
            missing.append("AZURE_CLIENT_SECRET")

        if missing:
            msg = f"Missing required environment variables: {', '.join(missing)}"
            raise ConfigError(msg)

        if self.run_mode.lower() not in RUN_MODES:
            msg = f"Invalid RUN_MODE: {self.run_mode!r} (use one of {', '.join(RUN_MODES)})"
            raise ConfigError(msg)

        if not croniter.is_valid(self.cron_schedule):
            msg = f"Invalid CRON_SCHEDULE: {self.cron_schedule!r}"
            raise ConfigError(msg)

        try:
            ZoneInfo(self.schedule_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            msg = f"Unknown SCHEDULE_TIMEZONE: {self.schedule_timezone!r}"
            raise ConfigError(msg) from None

        # Fail before serving rather than on the first run
        self.thresholds  # noqa: B018
        self.mail_config.validate()

    @cached_property
    def client_credentials(self) -> ClientCredentials:
        """Get the app registration used for Graph (and ACS without a key)."""
        return ClientCredentials(
            tenant_id=self.azure_tenant_id,
            client_id=self.azure_client_id,
            client_secret=self.azure_client_secret,
        )

    @cached_property
    def token_safety_margin(self) -> timedelta:
        """Get how long before expiry tokens are refreshed."""
        return timedelta(seconds=self.token_safety_margin_seconds)

    @cached_property
    def graph_config(self) -> GraphClientConfig:
        """Get Graph API client configuration."""
        return GraphClientConfig(timeout=self.graph_timeout_seconds)

    @cached_property
    def thresholds(self) -> NotificationThresholds:
        """
        Get notification thresholds.

        Unlike the API query parameter, every token must be an integer here.
        """
        tokens = [t.strip() for t in self.notification_thresholds.split(",") if t.strip()]
        try:
            days = [int(t) for t in tokens]
        except ValueError:
            msg = f"NOTIFICATION_THRESHOLDS must be comma-separated integers, got {self.notification_thresholds!r}"
            raise ConfigError(msg) from None
        return NotificationThresholds.of(days) if days else NotificationThresholds.default()

    @cached_property
    def smtp_config(self) -> SmtpConfig | None:
        """Get SMTP configuration, if SMTP is the selected provider."""
        if not self.smtp_host:
            return None
        return SmtpConfig(
            host=self.smtp_host,
            port=self.smtp_port,
            username=self.smtp_username,
            password=self.smtp_password,
            secure=self.smtp_secure,
        )

    @cached_property
    def acs_config(self) -> AcsEmailConfig | None:
        """Get ACS email configuration, if ACS is the selected provider."""
        if not self.acs_endpoint:
            return None
        return AcsEmailConfig(
            endpoint=self.acs_endpoint,
            access_key=self.acs_key,
            poll_interval=self.acs_poll_interval_seconds,
            poll_timeout=self.acs_poll_timeout_seconds,
        )

    @cached_property
    def mail_config(self) -> MailConfig:
        """Get mail configuration."""
        return MailConfig(
            from_address=self.mail_from,
            to_addresses=self.mail_to,
            smtp=self.smtp_config,
            acs=self.acs_config,
            # Use main Azure credentials for ACS when no access key is given
            acs_credentials=self.client_credentials,
        )

    @cached_property
    def dashboard_config(self) -> DashboardConfig:
        """Get dashboard sign-in configuration."""
        return DashboardConfig(
            tenant_id=self.azure_tenant_id,
            client_id=self.azure_client_id,
            redirect_uri=self.redirect_uri,
            authority=self.authority,
            scopes=self.scopes,
            api_audience=self.api_audience,
        )


def load_settings() -> Settings:
    """Load and validate settings from environment."""
    settings = Settings()
    settings.validate()
    return settings
