"""Custom exception classes for the proxy.

Each exception carries the HTTP status code the handler should answer
with; its message becomes the ``{"error": {"message": ...}}`` payload
returned to the caller.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Optional


class AppError(Exception):
    """Base exception for proxy errors.

    Attributes:
        message: Human-readable error message sent to the caller.
        status_code: HTTP status code (default 500).
        detail: Optional additional context, logged but never returned.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class ConfigurationError(AppError):
    """Raised when required configuration is missing or invalid.

    Use when environment variables or secrets are not properly configured.
    """

    def __init__(self, config_name: str, reason: Optional[str] = None):
        if reason:
            message = f"Invalid configuration: {config_name} ({reason})"
        else:
            message = f"Missing required configuration: {config_name}"
        super().__init__(message, status_code=500)
        self.config_name = config_name


class UpstreamHTTPError(AppError):
    """Raised when the upstream node answers with a non-success status.

    The message is the upstream status text; when the upstream sends an
    empty reason phrase (HTTP/2, some load balancers) the standard phrase
    for the code is used instead.
    """

    def __init__(self, status_code: int, reason: Optional[str] = None):
        super().__init__(
            reason or _standard_phrase(status_code),
            status_code=status_code,
        )
        self.reason = reason


class UpstreamConnectionError(AppError):
    """Raised when the upstream node cannot be reached.

    Use for DNS failures, refused connections, TLS errors and timeouts.
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message, status_code=502, detail=detail)


def _standard_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"HTTP {status_code}"
