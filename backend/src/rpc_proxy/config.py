"""Environment-derived configuration for the proxy Lambda.

Environment:
    INFURA_ENDPOINT             upstream JSON-RPC URL, including the API key
    INFURA_ENDPOINT_SECRET_ARN  Secrets Manager secret holding the URL, used
                                when INFURA_ENDPOINT is unset
    ALLOW_ORIGIN                Access-Control-Allow-Origin value (default ``*``)
    UPSTREAM_TIMEOUT_SECONDS    outbound socket timeout (default: none)
"""

from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from rpc_proxy.exceptions import ConfigurationError
from rpc_proxy.services.secrets import ENDPOINT_SECRET_ARN_ENV
from rpc_proxy.services.secrets import get_endpoint_secret

ENDPOINT_ENV = "INFURA_ENDPOINT"
ALLOW_ORIGIN_ENV = "ALLOW_ORIGIN"
TIMEOUT_ENV = "UPSTREAM_TIMEOUT_SECONDS"

DEFAULT_ALLOW_ORIGIN = "*"


class ProxySettings(BaseModel):
    """Settings for one invocation."""

    model_config = ConfigDict(frozen=True)

    upstream_endpoint: Optional[str] = None
    endpoint_secret_arn: Optional[str] = None
    allow_origin: str = DEFAULT_ALLOW_ORIGIN
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


def get_allow_origin() -> str:
    """Return the configured CORS origin.

    Only an unset variable falls back to ``*``; an empty value is kept.
    """
    value = os.getenv(ALLOW_ORIGIN_ENV)
    return DEFAULT_ALLOW_ORIGIN if value is None else value


def load_settings() -> ProxySettings:
    """Build settings from the current environment.

    Raises:
        ConfigurationError: if UPSTREAM_TIMEOUT_SECONDS is not a positive number.
    """
    raw_timeout = (os.getenv(TIMEOUT_ENV) or "").strip()
    try:
        return ProxySettings(
            upstream_endpoint=(os.getenv(ENDPOINT_ENV) or "").strip() or None,
            endpoint_secret_arn=(os.getenv(ENDPOINT_SECRET_ARN_ENV) or "").strip() or None,
            allow_origin=get_allow_origin(),
            timeout_seconds=raw_timeout or None,
        )
    except PydanticValidationError as exc:
        raise ConfigurationError(TIMEOUT_ENV, "must be a positive number") from exc


def resolve_upstream_endpoint(settings: ProxySettings) -> str:
    """Return the upstream endpoint URL.

    The plain environment variable wins over the secret.

    Raises:
        ConfigurationError: if neither source is configured, or the
            configured value is not an http(s) URL.
    """
    if settings.upstream_endpoint:
        return _require_http_url(settings.upstream_endpoint, ENDPOINT_ENV)
    if settings.endpoint_secret_arn:
        return _require_http_url(
            get_endpoint_secret(settings.endpoint_secret_arn),
            ENDPOINT_SECRET_ARN_ENV,
        )
    raise ConfigurationError(ENDPOINT_ENV)


def _require_http_url(url: str, config_name: str) -> str:
    # The URL carries the API key: never echo it in the error.
    endpoint = url.strip()
    try:
        parts = urlsplit(endpoint)
        valid = parts.scheme in ("http", "https") and bool(parts.hostname)
    except ValueError:
        valid = False
    if not valid:
        raise ConfigurationError(config_name, "must be an http(s) URL")
    return endpoint
