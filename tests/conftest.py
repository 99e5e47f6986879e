"""Pytest configuration and fixtures for SMTP relay tests.

Provides reusable fixtures for unit and integration tests including
relay configuration, mocked SMTP connections and FastAPI test clients.

Author: Odiseo
Version: 1.0.0
"""

from __future__ import annotations

import base64
import os
from typing import Any, Generator
from unittest.mock import MagicMock

import pytest

# Set test environment before importing application modules
os.environ.setdefault("SMTP_HOST", "smtp.test.com")
os.environ.setdefault("SMTP_USERNAME", "test@test.com")
os.environ.setdefault("SMTP_PASSWORD", "testpassword")
os.environ.setdefault("SMTP_FROM", "noreply@test.com")
os.environ.setdefault("LOG_TO_FILE", "false")

from smtp_relay.config.settings import RelayConfig  # noqa: E402
from smtp_relay.models.email import SendResult  # noqa: E402


def make_config(**overrides: Any) -> RelayConfig:
    """Build a RelayConfig for tests, ignoring any .env file."""
    values: dict[str, Any] = {
        "SMTP_HOST": "smtp.test.com",
        "SMTP_PORT": 465,
        "SMTP_USERNAME": "test@test.com",
        "SMTP_PASSWORD": "testpassword",
        "SMTP_FROM": "noreply@test.com",
        "SMTP_ENCRYPTION": "ssl",
        "SMTP_TIMEOUT": 30,
        "REQUIRE_HTTPS": True,
        "TRUST_FORWARDED_PROTO": False,
        "API_ROUTE_PATH": "/",
        "LOG_TO_FILE": False,
    }
    values.update(overrides)
    return RelayConfig(_env_file=None, **values)


# =============================================================================
# Configuration Fixtures
# =============================================================================
@pytest.fixture
def config_factory():
    """Return a builder for RelayConfig with per-test overrides."""
    return make_config


@pytest.fixture
def relay_config() -> RelayConfig:
    """Create a complete relay configuration."""
    return make_config()


@pytest.fixture
def smtp_config(relay_config: RelayConfig):
    """Create the SMTPConfig derived from relay_config (implicit TLS)."""
    return relay_config.get_smtp_config()


@pytest.fixture
def starttls_smtp_config():
    """Create an SMTPConfig using STARTTLS on port 587."""
    return make_config(SMTP_PORT=587, SMTP_ENCRYPTION="tls").get_smtp_config()


# =============================================================================
# SMTP Fixtures
# =============================================================================
@pytest.fixture
def mock_smtp_connection() -> MagicMock:
    """Create a mock SMTP connection."""
    smtp = MagicMock()
    smtp.ehlo.return_value = (250, b"OK")
    smtp.starttls.return_value = (220, b"TLS ready")
    smtp.login.return_value = (235, b"Authentication successful")
    smtp.send_message.return_value = {}
    smtp.quit.return_value = (221, b"Bye")
    return smtp


@pytest.fixture
def mock_sender() -> MagicMock:
    """Create a mock sender that reports successful delivery."""
    sender = MagicMock()
    sender.send.return_value = SendResult.sent()
    return sender


# =============================================================================
# Payload Fixtures
# =============================================================================
@pytest.fixture
def sample_payload() -> dict[str, Any]:
    """Create a valid relay request payload."""
    return {
        "to": "user@example.com",
        "subject": "Test Email",
        "body": "<h1>Hello</h1><p>Test body</p>",
    }


@pytest.fixture
def sample_attachment() -> dict[str, str]:
    """Create a valid attachment entry."""
    return {
        "filename": "hello.txt",
        "content": base64.b64encode(b"Hello World!").decode("ascii"),
    }


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================
@pytest.fixture
def test_client(
    relay_config: RelayConfig, mock_sender: MagicMock
) -> Generator[Any, None, None]:
    """Create an HTTPS FastAPI test client with a mocked sender."""
    from fastapi.testclient import TestClient

    from smtp_relay.api.main import create_app

    app = create_app(relay_config, smtp_client=mock_sender, configure_logging=False)
    with TestClient(
        app, base_url="https://testserver", raise_server_exceptions=False
    ) as client:
        yield client


@pytest.fixture
def http_client(
    relay_config: RelayConfig, mock_sender: MagicMock
) -> Generator[Any, None, None]:
    """Create a plain-HTTP FastAPI test client with a mocked sender."""
    from fastapi.testclient import TestClient

    from smtp_relay.api.main import create_app

    app = create_app(relay_config, smtp_client=mock_sender, configure_logging=False)
    with TestClient(
        app, base_url="http://testserver", raise_server_exceptions=False
    ) as client:
        yield client
