"""Core module for the SMTP relay.

Provides the exception taxonomy and logging configuration.

Author: Odiseo
Created: 2025-10-18
Version: 2.0.0
"""

from smtp_relay.core.exceptions import (
    PayloadValidationError,
    RelayConfigError,
    RelayRequestError,
    RelayServiceError,
    SMTPClientError,
    TransportError,
)
from smtp_relay.core.logger import (
    get_logger,
    get_logs_directory,
    log_context,
    setup_logging,
)

__all__ = [
    # Exceptions
    "RelayServiceError",
    "RelayConfigError",
    "RelayRequestError",
    "TransportError",
    "PayloadValidationError",
    "SMTPClientError",
    # Logging
    "get_logger",
    "setup_logging",
    "get_logs_directory",
    "log_context",
]
