"""
Pytest Configuration and Fixtures

Shared fixtures for unit tests.
"""

import json
from urllib.parse import parse_qs

import httpx
import pytest
import structlog

from danthes.config import Settings


FIXED_NOW = 1_700_000_000.123


# ══════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


# ══════════════════════════════════════════════════════════════
# Settings Fixtures
# ══════════════════════════════════════════════════════════════


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at a fake pub/sub server."""
    return Settings(
        env="test",
        server="http://x.test",
        mount="/faye",
        secret_token="secret",
    )


@pytest.fixture
def fixed_now() -> float:
    """Epoch seconds the fixed clock is frozen at."""
    return FIXED_NOW


@pytest.fixture
def fixed_clock(fixed_now):
    """Clock frozen at fixed_now seconds."""
    return lambda: fixed_now


# ══════════════════════════════════════════════════════════════
# Transport Fixtures
# ══════════════════════════════════════════════════════════════


class TransportSpy:
    """Records requests and answers them with a canned response."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text="")

    @property
    def messages(self) -> list[dict]:
        """Decoded ``message`` form fields of recorded requests."""
        decoded = []
        for request in self.requests:
            form = parse_qs(request.content.decode())
            decoded.append(json.loads(form["message"][0]))
        return decoded


@pytest.fixture
def transport_spy() -> TransportSpy:
    return TransportSpy()


@pytest.fixture
def mock_transport(transport_spy) -> httpx.MockTransport:
    return httpx.MockTransport(transport_spy)


# ══════════════════════════════════════════════════════════════
# Config File Fixtures
# ══════════════════════════════════════════════════════════════


@pytest.fixture
def config_file(tmp_path):
    """YAML config with development and production sections."""
    path = tmp_path / "danthes.yml"
    path.write_text(
        """
development:
  server: "http://localhost:9292"
  secret_token: "dev-secret"
  signature_expiration: 600
  mount: "/faye"
  unknown_key: "ignored"
production:
  server: "https://push.example.com"
  secret_token: "${DANTHES_TEST_SECRET}"
  timeout: 45
"""
    )
    return path


@pytest.fixture
def redis_config_file(tmp_path):
    path = tmp_path / "danthes_redis.yml"
    path.write_text(
        """
development:
  host: "redis.internal"
  port: 6380
  database: 2
  flavour: "ignored"
"""
    )
    return path
