"""Mail dispatch handler.

Turns one inbound HTTP request into at most one SMTP send and exactly one
JSON response. The handler knows nothing about the web framework: the
hosting layer supplies the method, raw body and whether the request
arrived over HTTPS.

Pipeline:
    transport guard -> JSON parse -> required fields -> recipient ->
    subject -> attachments -> SMTP send -> response

Author: Odiseo
Version: 1.0.0
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import ValidationError

from smtp_relay.config.settings import RelayConfig
from smtp_relay.core.exceptions import (
    PayloadValidationError,
    RelayRequestError,
    TransportError,
)
from smtp_relay.core.logger import get_logger
from smtp_relay.models.attachment import decode_attachments
from smtp_relay.models.email import SendRequest, SendResult

logger = get_logger(__name__)

REQUIRED_FIELDS = ["to", "subject", "body"]

# First matching field decides the error reported for a rejected payload.
FIELD_ERRORS = (
    ("to", "Invalid email address"),
    ("subject", "Subject cannot be empty"),
)


class MailSender(Protocol):
    """Anything able to relay a SendRequest."""

    def send(self, request: SendRequest) -> SendResult: ...


@dataclass(frozen=True)
class InboundRequest:
    """Transport-level view of an HTTP request.

    Attributes:
        method: HTTP method, upper case.
        body: Raw request body.
        is_secure: Whether the request arrived over HTTPS.
    """

    method: str
    body: bytes = b""
    is_secure: bool = False


@dataclass(frozen=True)
class RelayResponse:
    """Status code and JSON payload to return to the caller."""

    status_code: int
    payload: dict[str, Any] = field(default_factory=dict)


class MailDispatchHandler:
    """Validate a request and relay it through the SMTP client.

    Attributes:
        config: Immutable relay configuration.
        sender: Client used to deliver validated requests.
    """

    def __init__(self, config: RelayConfig, sender: MailSender) -> None:
        self.config = config
        self.sender = sender

    def handle(self, request: InboundRequest) -> RelayResponse:
        """Handle one inbound request.

        Args:
            request: Method, body and transport security of the request.

        Returns:
            The response to send back; never raises for request errors.
        """
        try:
            self._check_transport(request)
            payload = self._parse_json(request.body)
            send_request = self._build_send_request(payload)
        except RelayRequestError as e:
            logger.warning(f"Request rejected ({e.status_code}): {e.error}")
            return RelayResponse(e.status_code, e.to_payload())

        result = self.sender.send(send_request)

        if result.success:
            return RelayResponse(200, {"success": True, "message": result.message})

        # The sender has already logged the diagnostic.
        return RelayResponse(
            500, {"error": "Failed to send email", "message": result.error}
        )

    def _check_transport(self, request: InboundRequest) -> None:
        """Enforce HTTPS (when required) and the POST method.

        Raises:
            TransportError: On a plain-HTTP request or a non-POST method.
        """
        if self.config.REQUIRE_HTTPS and not request.is_secure:
            raise TransportError("HTTPS required", status_code=400)

        if request.method.upper() != "POST":
            raise TransportError("Method not allowed. Use POST.", status_code=405)

    @staticmethod
    def _parse_json(body: bytes) -> Any:
        """Decode the request body as JSON.

        Raises:
            PayloadValidationError: With the parser diagnostic.
        """
        try:
            payload = json.loads(body)
            # \u escapes can decode to lone surrogates, which no message can carry.
            json.dumps(payload, ensure_ascii=False).encode("utf-8")
        except (ValueError, RecursionError) as e:
            raise PayloadValidationError("Invalid JSON", message=str(e)) from e
        return payload

    @staticmethod
    def _build_send_request(payload: Any) -> SendRequest:
        """Validate the parsed payload and decode its attachments.

        Raises:
            PayloadValidationError: On the first failing check.
        """
        if not isinstance(payload, dict) or any(
            payload.get(name) is None for name in REQUIRED_FIELDS
        ):
            raise PayloadValidationError(
                "Missing required fields", required=REQUIRED_FIELDS
            )

        fields = {name: payload[name] for name in REQUIRED_FIELDS}
        try:
            validated = SendRequest.model_validate(fields)
        except ValidationError as e:
            failed = {error["loc"][0] for error in e.errors() if error["loc"]}
            for name, message in FIELD_ERRORS:
                if name in failed:
                    raise PayloadValidationError(message) from e
            raise PayloadValidationError("Invalid request") from e

        attachments = decode_attachments(payload.get("attachments"))
        if not attachments:
            return validated
        return validated.model_copy(update={"attachments": attachments})
