"""Outbound call to the upstream JSON-RPC node.

A single POST per invocation: no retries, no connection reuse. HTTP error
statuses are returned to the caller as values; only transport failures
raise.
"""

from __future__ import annotations

import json
import socket
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any
from typing import Optional

from rpc_proxy.exceptions import UpstreamConnectionError
from rpc_proxy.utils.logging import get_logger
from rpc_proxy.utils.logging import mask_endpoint

logger = get_logger(__name__)


@dataclass(frozen=True)
class UpstreamResponse:
    """Status line and raw body of an upstream reply."""

    status: int
    reason: str
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Parse the body as JSON.

        Raises:
            json.JSONDecodeError: if the body is not valid JSON.
        """
        return json.loads(self.body)


def forward(
    endpoint: str,
    body: Optional[bytes],
    timeout: Optional[float] = None,
) -> UpstreamResponse:
    """POST ``body`` verbatim to ``endpoint`` as JSON.

    Args:
        endpoint: Upstream URL, including the API key.
        body: Raw request body; ``None`` sends no body.
        timeout: Socket timeout in seconds; ``None`` keeps the runtime default.

    Returns:
        The upstream response, whatever its status.

    Raises:
        UpstreamConnectionError: if the upstream cannot be reached.
    """
    req = urllib.request.Request(
        endpoint,
        data=body,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    kwargs: dict[str, Any] = {}
    if timeout is not None:
        kwargs["timeout"] = timeout

    logger.info(
        f"Forwarding request to {mask_endpoint(endpoint)}",
        extra={"body_length": len(body or b"")},
    )

    try:
        with urllib.request.urlopen(req, **kwargs) as resp:
            return UpstreamResponse(
                status=resp.status,
                reason=resp.reason or "",
                body=resp.read(),
            )
    except urllib.error.HTTPError as exc:
        try:
            error_body = exc.read()
        except Exception:  # nosec B110 - best-effort body read; empty body is fine
            error_body = b""
        return UpstreamResponse(
            status=exc.code,
            reason=exc.reason or "",
            body=error_body or b"",
        )
    except urllib.error.URLError as exc:
        raise UpstreamConnectionError(
            str(exc.reason),
            detail=_error_type(exc.reason),
        ) from exc
    except (socket.timeout, ConnectionError) as exc:
        raise UpstreamConnectionError(
            str(exc) or type(exc).__name__,
            detail=type(exc).__name__,
        ) from exc


def _error_type(reason: Any) -> Optional[str]:
    return type(reason).__name__ if isinstance(reason, BaseException) else None
