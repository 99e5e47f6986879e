"""Custom exceptions for the SMTP relay.

Defines the error taxonomy used by the relay so that each failure class
maps onto exactly one HTTP response.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from __future__ import annotations

from typing import Any


class RelayServiceError(Exception):
    """Base exception for all SMTP relay errors.

    Example:
        try:
            handler.handle(request)
        except RelayServiceError as e:
            logger.error(f"Relay error: {e}")
    """

    pass


class RelayConfigError(RelayServiceError):
    """Exception raised for configuration errors.

    Fatal at startup: a relay with an invalid configuration refuses to
    send anything.

    Attributes:
        key (str, optional): Name of the missing or invalid setting.

    Example:
        raise RelayConfigError(
            "Missing required configuration: host", key="host"
        )
    """

    def __init__(self, message: str, key: str | None = None):
        """Initialize configuration error.

        Args:
            message: Error description.
            key: Optional name of the offending setting.
        """
        super().__init__(message)
        self.key = key


class RelayRequestError(RelayServiceError):
    """Base class for errors that terminate a single request.

    Each subclass knows its HTTP status code and renders itself into the
    JSON body returned to the caller.

    Attributes:
        error (str): Short error label returned as ``error``.
        status_code (int): HTTP status code of the response.
    """

    status_code = 400

    def __init__(self, error: str, status_code: int | None = None):
        super().__init__(error)
        self.error = error
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON body for this error."""
        return {"error": self.error}


class TransportError(RelayRequestError):
    """Exception raised when a request arrives over the wrong transport.

    Covers plain-HTTP requests when HTTPS is required (400) and methods
    other than POST (405).

    Example:
        raise TransportError("Method not allowed. Use POST.", status_code=405)
    """

    pass


class PayloadValidationError(RelayRequestError):
    """Exception raised for an invalid request payload.

    Attributes:
        message (str, optional): Parser or validator diagnostic.
        required (list[str], optional): Required field names to report.

    Example:
        raise PayloadValidationError(
            "Missing required fields", required=["to", "subject", "body"]
        )
    """

    def __init__(
        self,
        error: str,
        message: str | None = None,
        required: list[str] | None = None,
    ):
        """Initialize payload validation error.

        Args:
            error: Short error label.
            message: Optional diagnostic detail.
            required: Optional list of required field names.
        """
        super().__init__(error, status_code=400)
        self.message = message
        self.required = required

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.message is not None:
            payload["message"] = self.message
        if self.required is not None:
            payload["required"] = list(self.required)
        return payload


class SMTPClientError(RelayServiceError):
    """Exception raised for SMTP connection/delivery failures.

    Raised inside the SMTP client for connection, authentication and
    delivery problems. The client converts it into a failed ``SendResult``
    before it reaches the handler.

    Attributes:
        detail (str): Underlying SMTP diagnostic.

    Example:
        raise SMTPClientError(
            "Failed to connect to SMTP server: Connection refused",
            detail="Connection refused",
        )
    """

    def __init__(self, message: str, detail: str | None = None):
        """Initialize SMTP client error.

        Args:
            message: Error description.
            detail: Underlying diagnostic text (defaults to message).
        """
        super().__init__(message)
        self.detail = detail if detail is not None else message
