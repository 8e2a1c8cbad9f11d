"""Structured logging utilities for the proxy Lambda.

This module provides JSON-formatted logging with request context,
suitable for CloudWatch Logs Insights queries.

SECURITY NOTES:
- The upstream endpoint URL embeds the node provider API key. Always pass
  it through mask_endpoint() before logging.
- Never log request or response bodies; log their length instead.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Mapping
from typing import MutableMapping
from typing import Optional
from urllib.parse import urlsplit


def mask_endpoint(url: Optional[str]) -> str:
    """Mask an upstream endpoint URL for safe logging.

    SECURITY: Node providers put the API key in the path
    (``https://mainnet.infura.io/v3/<key>``) or the query string.
    Only the scheme and host are kept.

    Args:
        url: The endpoint URL to mask.

    Returns:
        A masked version like "https://mainnet.infura.io/***".

    Examples:
        >>> mask_endpoint("https://mainnet.infura.io/v3/abc123")
        'https://mainnet.infura.io/***'
        >>> mask_endpoint("")
        '***'
    """
    if not url:
        return "***"
    parts = urlsplit(url)
    if not parts.scheme or not parts.hostname:
        return "***"
    host = parts.hostname
    if parts.port:
        host = f"{host}:{parts.port}"
    return f"{parts.scheme}://{host}/***"


# Context variables for request tracking
request_id: ContextVar[str] = ContextVar("request_id", default="")
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Produces log entries compatible with CloudWatch Logs Insights,
    including request context and exception details.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        req_id = request_id.get()
        if req_id:
            log_data["request_id"] = req_id

        corr_id = correlation_id.get()
        if corr_id:
            log_data["correlation_id"] = corr_id

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        if hasattr(record, "extra") and isinstance(record.extra, dict):
            log_data["extra"] = record.extra

        return json.dumps(log_data, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that nests caller context under the ``extra`` key."""

    def process(
        self,
        msg: str,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        """Process log message to include extra context."""
        extra = dict(kwargs.get("extra") or {})

        if self.extra:
            extra.update(self.extra)

        kwargs["extra"] = {"extra": extra} if extra else {}
        return msg, kwargs


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structured logging for Lambda execution.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to
               LOG_LEVEL environment variable or INFO.
    """
    log_level: str = (level or os.getenv("LOG_LEVEL") or "INFO").upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # The Lambda runtime installs its own handler; replace it.
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredLogFormatter())
    root_logger.addHandler(handler)

    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str, **extra: Any) -> ContextLogger:
    """Get a context-aware logger.

    Args:
        name: Logger name (typically __name__).
        **extra: Additional context to include in all log messages.

    Returns:
        A ContextLogger instance.
    """
    logger = logging.getLogger(name)
    return ContextLogger(logger, extra)


def set_request_context(
    req_id: Optional[str] = None,
    corr_id: Optional[str] = None,
) -> None:
    """Set request context for logging.

    Call this at the start of each Lambda invocation.

    Args:
        req_id: AWS request ID from the Lambda context.
        corr_id: API Gateway request ID, used for correlation.
    """
    if req_id:
        request_id.set(req_id)
    if corr_id:
        correlation_id.set(corr_id)


def clear_request_context() -> None:
    """Clear request context after Lambda invocation."""
    request_id.set("")
    correlation_id.set("")


def log_lambda_event(
    logger: ContextLogger,
    event: Mapping[str, Any],
    method: Optional[str] = None,
) -> None:
    """Log Lambda event details at DEBUG level.

    The body itself is never logged, only its length.

    Args:
        logger: The logger to use.
        event: The Lambda event dictionary.
        method: The resolved HTTP method, if already known.
    """
    body = event.get("body") or ""
    log_data = {
        "http_method": method or event.get("httpMethod"),
        "path": event.get("path") or event.get("rawPath"),
        "body_length": len(body),
        "is_base64_encoded": bool(event.get("isBase64Encoded")),
    }

    logger.debug("Lambda event received", extra={"event": log_data})


def log_response(
    logger: ContextLogger,
    status_code: int,
    duration_ms: Optional[float] = None,
) -> None:
    """Log Lambda response details.

    Args:
        logger: The logger to use.
        status_code: HTTP status code of the response.
        duration_ms: Request duration in milliseconds.
    """
    log_data: dict[str, Any] = {"status_code": status_code}
    if duration_ms is not None:
        log_data["duration_ms"] = round(duration_ms, 2)

    level = logging.INFO if status_code < 400 else logging.WARNING
    logger.log(level, "Lambda response", extra={"response": log_data})
