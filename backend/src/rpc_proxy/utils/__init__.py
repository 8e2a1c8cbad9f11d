"""Utility modules for the proxy Lambda."""

from rpc_proxy.utils.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    mask_endpoint,
    set_request_context,
)
from rpc_proxy.utils.responses import (
    error_response,
    json_response,
)

__all__ = [
    "clear_request_context",
    "configure_logging",
    "error_response",
    "get_logger",
    "json_response",
    "mask_endpoint",
    "set_request_context",
]
