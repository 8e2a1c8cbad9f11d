"""Lambda entrypoint for the JSON-RPC node proxy.

Hides the upstream node endpoint (and the API key it embeds) behind
API Gateway; see ``rpc_proxy.api.proxy`` for the request contract.
"""

from __future__ import annotations

from typing import Any
from typing import Mapping

from rpc_proxy.api.proxy import lambda_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the proxy handler."""
    return _handler(event, context)
