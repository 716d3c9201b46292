"""Application layer exceptions."""


class ApplicationError(Exception):
    """Base exception for application errors."""


class AuthError(ApplicationError):
    """Raised when the client-credentials token exchange fails."""


class DirectoryError(ApplicationError):
    """Raised when a directory listing request fails."""

    def __init__(self, status: int | None, url: str, detail: str = "") -> None:
        self.status = status
        self.url = url
        self.detail = detail
        status_text = status if status is not None else "no response"
        message = f"Directory request failed ({status_text}): {url}"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(message)


class DeliveryError(ApplicationError):
    """Raised when a notification cannot be delivered."""

    def __init__(self, message: str, *, reason: str = "failed") -> None:
        self.reason = reason
        super().__init__(message)


class ConfigError(ApplicationError):
    """Raised when configuration is missing or invalid."""
