"""Lambda handler proxying JSON-RPC requests to the upstream node.

The upstream endpoint URL contains the node provider API key; the
server-to-server call made here keeps it hidden from the client.

Request and response JSON payloads are passed through as is. Upstream
error statuses and internal failures are returned to the client as::

    {"error": {"message": "<text>"}}

Status codes for failures:
    - upstream non-2xx: the upstream status
    - upstream unreachable: 502
    - missing or invalid configuration: 500
    - any other fault (e.g. upstream body is not JSON): 502
"""

from __future__ import annotations

import base64
import time
from typing import Any
from typing import Mapping
from typing import Optional

from rpc_proxy.config import ProxySettings
from rpc_proxy.config import get_allow_origin
from rpc_proxy.config import load_settings
from rpc_proxy.config import resolve_upstream_endpoint
from rpc_proxy.exceptions import AppError
from rpc_proxy.exceptions import ConfigurationError
from rpc_proxy.exceptions import UpstreamHTTPError
from rpc_proxy.services.upstream import forward
from rpc_proxy.utils.logging import clear_request_context
from rpc_proxy.utils.logging import configure_logging
from rpc_proxy.utils.logging import get_logger
from rpc_proxy.utils.logging import log_lambda_event
from rpc_proxy.utils.logging import log_response
from rpc_proxy.utils.logging import set_request_context
from rpc_proxy.utils.responses import error_response
from rpc_proxy.utils.responses import json_response
from rpc_proxy.utils.responses import method_not_allowed_response
from rpc_proxy.utils.responses import preflight_response

# Configure logging on module load
configure_logging()
logger = get_logger(__name__)

# Status for failures that carry no status of their own.
FALLBACK_STATUS_CODE = 502


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Handle an API Gateway request for the proxy."""

    request_context = event.get("requestContext") or {}
    set_request_context(
        req_id=getattr(context, "aws_request_id", None),
        corr_id=request_context.get("requestId"),
    )
    start_time = time.perf_counter()

    try:
        try:
            settings = load_settings()
        except ConfigurationError as exc:
            logger.error(f"Configuration error: {exc.message}")
            settings = ProxySettings(allow_origin=get_allow_origin())
            response = error_response(exc.status_code, exc.message, settings)
        else:
            response = handle_request(event, settings)

        duration_ms = (time.perf_counter() - start_time) * 1000
        log_response(logger, response["statusCode"], duration_ms)
        return response
    finally:
        clear_request_context()


def handle_request(
    event: Mapping[str, Any],
    settings: ProxySettings,
) -> dict[str, Any]:
    """Answer one proxy request.

    Args:
        event: API Gateway event (REST v1 or HTTP API v2 payload).
        settings: Settings for this invocation.

    Returns:
        API Gateway response dictionary. Never raises.
    """
    method = get_http_method(event)
    log_lambda_event(logger, event, method=method)

    if method == "OPTIONS":
        return preflight_response(settings)

    if method != "POST":
        return method_not_allowed_response(settings)

    try:
        endpoint = resolve_upstream_endpoint(settings)
        upstream = forward(
            endpoint,
            get_request_body(event),
            timeout=settings.timeout_seconds,
        )

        if not upstream.ok:
            raise UpstreamHTTPError(upstream.status, upstream.reason)

        payload = upstream.json()
        return json_response(upstream.status, payload, settings)
    except AppError as exc:
        logger.warning(
            f"Proxy request failed: {exc.message}",
            extra={"status_code": exc.status_code, "detail": exc.detail},
        )
        return error_response(exc.status_code, exc.message, settings)
    except Exception as exc:
        logger.exception("Unexpected error in proxy")
        return error_response(FALLBACK_STATUS_CODE, str(exc), settings)


def get_http_method(event: Mapping[str, Any]) -> Optional[str]:
    """Return the request method from a REST (v1) or HTTP API (v2) event."""
    method = event.get("httpMethod")
    if method:
        return method
    http_context = (event.get("requestContext") or {}).get("http") or {}
    return http_context.get("method")


def get_request_body(event: Mapping[str, Any]) -> Optional[bytes]:
    """Return the raw request body bytes.

    API Gateway base64-encodes bodies it treats as binary; those are
    decoded back to the bytes the client sent.
    """
    body = event.get("body")
    if body is None:
        return None
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body.encode("utf-8")
