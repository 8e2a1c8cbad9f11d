"""Pytest configuration and fixtures for proxy tests.

This module provides shared fixtures for testing the proxy Lambda,
including API Gateway events, settings, and a mocked upstream node.
"""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from uuid import uuid4

import pytest

# Add backend source to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))

ENDPOINT = 'https://mainnet.infura.io/v3/0123456789abcdef0123456789abcdef'

PROXY_ENV_VARS = (
    'INFURA_ENDPOINT',
    'INFURA_ENDPOINT_SECRET_ARN',
    'ALLOW_ORIGIN',
    'UPSTREAM_TIMEOUT_SECONDS',
)


# --- Environment Fixtures ---


@pytest.fixture(autouse=True)
def clean_proxy_env(monkeypatch):
    """Remove proxy configuration from the environment and reset caches."""
    from rpc_proxy.services.secrets import clear_secret_cache

    for name in PROXY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_secret_cache()
    yield
    clear_secret_cache()


@pytest.fixture
def settings():
    """Settings with a configured endpoint and the default origin."""
    from rpc_proxy.config import ProxySettings

    return ProxySettings(upstream_endpoint=ENDPOINT)


# --- API Event Fixtures ---


@pytest.fixture
def api_gateway_event() -> dict:
    """Base API Gateway event for a JSON-RPC call."""
    return {
        'httpMethod': 'POST',
        'path': '/rpc',
        'queryStringParameters': None,
        'headers': {'Content-Type': 'application/json'},
        'requestContext': {
            'requestId': str(uuid4()),
        },
        'body': '{"jsonrpc":"2.0","method":"eth_blockNumber","id":1}',
        'isBase64Encoded': False,
    }


@pytest.fixture
def options_event(api_gateway_event) -> dict:
    """CORS preflight event."""
    event = api_gateway_event.copy()
    event['httpMethod'] = 'OPTIONS'
    event['body'] = None
    return event


@pytest.fixture
def lambda_context():
    """Minimal Lambda context object."""
    return SimpleNamespace(
        aws_request_id=str(uuid4()),
        function_name='rpc-proxy',
    )


# --- Mock Fixtures ---


class FakeUpstreamResponse:
    """Stand-in for the object returned by ``urllib.request.urlopen``."""

    def __init__(self, status: int = 200, reason: str = 'OK', body: bytes = b''):
        self.status = status
        self.reason = reason
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> 'FakeUpstreamResponse':
        return self

    def __exit__(self, *exc_info) -> bool:
        return False


@pytest.fixture
def mock_urlopen(mocker):
    """Patch ``urllib.request.urlopen``; defaults to a 200 JSON-RPC reply."""
    mock = mocker.patch('urllib.request.urlopen')
    mock.return_value = FakeUpstreamResponse(
        body=b'{"jsonrpc":"2.0","id":1,"result":"0x10"}',
    )
    return mock


@pytest.fixture
def mock_boto3_client(mocker):
    """Mock boto3 client for Secrets Manager calls."""
    return mocker.patch('rpc_proxy.services.secrets.boto3.client')
