"""Shared response utilities for the proxy Lambda.

Every response produced here is an API Gateway proxy integration
response and carries the CORS headers derived from ``ProxySettings``.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from typing import Any
from typing import Optional

from pydantic import BaseModel

from rpc_proxy.api.schemas import ErrorPayload

if TYPE_CHECKING:
    from rpc_proxy.config import ProxySettings

JSON_CONTENT_TYPE = "application/json"

PREFLIGHT_ALLOW_HEADERS = "Authorization,Content-type"
PREFLIGHT_ALLOW_METHODS = "OPTIONS,POST"


def get_cors_headers(settings: "ProxySettings") -> dict[str, str]:
    """Get the CORS headers attached to every response.

    Args:
        settings: Proxy settings holding the allowed origin.

    Returns:
        Dictionary of CORS headers.
    """
    return {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Origin": settings.allow_origin,
    }


def get_preflight_headers(settings: "ProxySettings") -> dict[str, str]:
    """Get the headers answering a CORS preflight request."""
    return {
        "Access-Control-Allow-Headers": PREFLIGHT_ALLOW_HEADERS,
        "Access-Control-Allow-Methods": PREFLIGHT_ALLOW_METHODS,
        **get_cors_headers(settings),
    }


def build_response(
    status_code: int,
    body: str = "",
    headers: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Create an API Gateway response dictionary.

    Args:
        status_code: HTTP status code.
        body: Already serialized response body.
        headers: Response headers.

    Returns:
        API Gateway response dictionary.
    """
    return {
        "statusCode": status_code,
        "headers": dict(headers or {}),
        "body": body,
        "isBase64Encoded": False,
    }


def empty_response(
    status_code: int,
    settings: "ProxySettings",
    headers: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Create a response with an empty body and the CORS headers."""
    response_headers = get_cors_headers(settings)
    if headers:
        response_headers.update(headers)
    return build_response(status_code, "", response_headers)


def preflight_response(settings: "ProxySettings") -> dict[str, Any]:
    """Answer a CORS preflight (OPTIONS) request."""
    return build_response(200, "", get_preflight_headers(settings))


def method_not_allowed_response(settings: "ProxySettings") -> dict[str, Any]:
    """Answer a request whose method is neither OPTIONS nor POST."""
    return empty_response(405, settings)


def json_response(
    status_code: int,
    body: Any,
    settings: "ProxySettings",
) -> dict[str, Any]:
    """Create a JSON response with the CORS headers.

    Args:
        status_code: HTTP status code.
        body: Response body (any JSON value or a Pydantic model).
        settings: Proxy settings holding the allowed origin.

    Returns:
        API Gateway response dictionary.
    """
    response_headers = {"Content-Type": JSON_CONTENT_TYPE}
    response_headers.update(get_cors_headers(settings))

    payload = _serialize_body(body)

    # NaN and Infinity are not JSON; fail instead of emitting them.
    return build_response(
        status_code,
        json.dumps(payload, allow_nan=False),
        response_headers,
    )


def _serialize_body(body: Any) -> Any:
    """Serialize response body to JSON-compatible format."""
    if isinstance(body, BaseModel):
        return body.model_dump()

    return body


def error_response(
    status_code: int,
    message: str,
    settings: "ProxySettings",
) -> dict[str, Any]:
    """Create an error response with the ``{"error": {"message"}}`` body.

    Args:
        status_code: HTTP status code.
        message: Error message.
        settings: Proxy settings holding the allowed origin.

    Returns:
        API Gateway response dictionary.
    """
    return json_response(
        status_code,
        ErrorPayload.from_message(message),
        settings,
    )
