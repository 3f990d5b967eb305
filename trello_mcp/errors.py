"""Exceptions raised by the Trello client and the tenant credential checks."""
from typing import Any, Dict, Optional

DEFAULT_RETRY_AFTER = 60


class TrelloError(Exception):
    """Base class for every error this package raises on purpose."""

    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CredentialsError(TrelloError):
    """A tenant request arrived without a usable API key or token."""


class ApiError(TrelloError):
    """The Trello API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500


class AuthenticationError(ApiError):
    """Trello rejected the API key or token (HTTP 401)."""

    def __init__(self, message: str = "Invalid API key or token", body: Optional[str] = None):
        super().__init__(message, 401, body)

    @property
    def retryable(self) -> bool:
        return False


class RateLimitError(ApiError):
    """Trello throttled the tenant (HTTP 429). Callers may retry after `retry_after` seconds."""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: int = DEFAULT_RETRY_AFTER,
                 body: Optional[str] = None):
        super().__init__(message, 429, body)
        self.retry_after = retry_after

    @property
    def retryable(self) -> bool:
        return True


def error_details(error: BaseException) -> Dict[str, Any]:
    """Structured diagnostics for an error, safe to hand back to the caller."""
    details: Dict[str, Any] = {
        "name": type(error).__name__,
        "message": str(error),
    }
    if isinstance(error, TrelloError):
        details["retryable"] = error.retryable
    if isinstance(error, ApiError):
        details["status_code"] = error.status_code
        if error.body:
            details["body"] = error.body
    if isinstance(error, RateLimitError):
        details["retry_after"] = error.retry_after
    return details
