"""Secrets Manager lookup of the upstream endpoint.

The endpoint URL embeds the node provider API key, so deployments may keep
it in Secrets Manager instead of a plain environment variable. The secret
is either the bare URL or a JSON object holding it under ``endpoint``.

Values are cached for the lifetime of the Lambda container so warm
invocations do not call Secrets Manager again.

Errors name the environment variable, never the ARN: the ARN exposes the
account id and region and is only logged.
"""

from __future__ import annotations

import base64
import json
from typing import Any

import boto3

from rpc_proxy.exceptions import ConfigurationError
from rpc_proxy.utils.logging import get_logger

logger = get_logger(__name__)

ENDPOINT_SECRET_ARN_ENV = "INFURA_ENDPOINT_SECRET_ARN"
ENDPOINT_SECRET_KEY = "endpoint"

_secretsmanager_client: Any = None
_SECRET_CACHE: dict[str, str] = {}


def _get_secretsmanager_client() -> Any:
    global _secretsmanager_client
    if _secretsmanager_client is None:
        _secretsmanager_client = boto3.client("secretsmanager")
    return _secretsmanager_client


def _secret_error(secret_arn: str, reason: str) -> ConfigurationError:
    logger.warning(
        f"Endpoint secret is misconfigured: {reason}",
        extra={"secret_arn": secret_arn},
    )
    return ConfigurationError(ENDPOINT_SECRET_ARN_ENV, reason)


def get_secret_string(secret_arn: str) -> str:
    """Fetch a secret's string value from AWS Secrets Manager."""
    if secret_arn in _SECRET_CACHE:
        return _SECRET_CACHE[secret_arn]

    response = _get_secretsmanager_client().get_secret_value(SecretId=secret_arn)
    secret_str = response.get("SecretString")
    if not secret_str and response.get("SecretBinary"):
        secret_str = base64.b64decode(response["SecretBinary"]).decode("utf-8")
    if not secret_str:
        raise _secret_error(secret_arn, "secret value is empty")

    _SECRET_CACHE[secret_arn] = secret_str
    return secret_str


def get_endpoint_secret(secret_arn: str) -> str:
    """Return the upstream endpoint URL stored in a secret.

    Raises:
        ConfigurationError: if the secret is malformed JSON or JSON without
            an ``endpoint`` key.
    """
    secret_str = get_secret_string(secret_arn).strip()
    if not secret_str.startswith("{"):
        return secret_str

    try:
        payload: dict[str, Any] = json.loads(secret_str)
    except json.JSONDecodeError as exc:
        raise _secret_error(secret_arn, "secret is not valid JSON") from exc
    endpoint = payload.get(ENDPOINT_SECRET_KEY)
    if not endpoint:
        raise _secret_error(
            secret_arn,
            f"secret has no '{ENDPOINT_SECRET_KEY}' key",
        )
    return str(endpoint)


def clear_secret_cache() -> None:
    """Clear cached secrets and the client (useful in tests)."""
    global _secretsmanager_client
    _SECRET_CACHE.clear()
    _secretsmanager_client = None
