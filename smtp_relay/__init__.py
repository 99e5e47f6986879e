"""SMTP Relay - single-endpoint HTTP to SMTP relay.

Accepts a JSON email (recipient, subject, HTML body, optional base64
attachments), validates it and relays it to one upstream SMTP server
with credentials configured at startup.

Architecture:
    - Immutable configuration (pydantic-settings)
    - Framework-free dispatch handler
    - SMTP client (implicit TLS or STARTTLS)
    - FastAPI host served by uvicorn

Modules:
    - core: Exceptions, logger
    - config: Pydantic v2 settings
    - models: Send request, attachments, results, SMTP config
    - clients: SMTP integration
    - api: Dispatch handler and HTTP application

Usage:
    # Serve the relay
    $ smtp-relay

    # Relay from Python
    from smtp_relay import SMTPClient, SendRequest, load_config

    config = load_config()
    client = SMTPClient(config.get_smtp_config())
    result = client.send(
        SendRequest(to="user@example.com", subject="Hi", body="<p>Hello</p>")
    )

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

__version__ = "1.0.0"

# Clients
from smtp_relay.clients import SMTPClient

# Configuration
from smtp_relay.config import RelayConfig, load_config

# Core utilities
from smtp_relay.core import (
    PayloadValidationError,
    RelayConfigError,
    RelayRequestError,
    RelayServiceError,
    SMTPClientError,
    TransportError,
    get_logger,
)

# Models
from smtp_relay.models import (
    Attachment,
    EncryptionMode,
    SendRequest,
    SendResult,
    SMTPConfig,
)

__all__ = [
    # Version
    "__version__",
    # Core exceptions
    "RelayServiceError",
    "RelayConfigError",
    "RelayRequestError",
    "TransportError",
    "PayloadValidationError",
    "SMTPClientError",
    "get_logger",
    # Configuration
    "RelayConfig",
    "load_config",
    # Models
    "EncryptionMode",
    "Attachment",
    "SendRequest",
    "SendResult",
    "SMTPConfig",
    # Clients
    "SMTPClient",
]
