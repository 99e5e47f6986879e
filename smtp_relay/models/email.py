"""Email data models.

Defines the encryption mode enum, the validated send request and the
explicit result of a dispatch attempt.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from __future__ import annotations

import json
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from smtp_relay.models.attachment import Attachment


class EncryptionMode(str, Enum):
    """SMTP transport encryption.

    Attributes:
        STARTTLS: Plain connection upgraded with STARTTLS.
        SMTPS: Implicit TLS from the first byte.
    """

    STARTTLS = "starttls"
    SMTPS = "smtps"

    @classmethod
    def from_setting(cls, value: str) -> EncryptionMode:
        """Resolve a configured encryption string.

        ``ssl`` and ``smtps`` (any case) select implicit TLS; every other
        value selects STARTTLS.
        """
        if value.strip().lower() in ("ssl", "smtps"):
            return cls.SMTPS
        return cls.STARTTLS


def scalar_to_text(value: object) -> object:
    """Render a JSON scalar as text: booleans as "1" or "", numbers via str()."""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, (int, float)):
        return str(value)
    return value


class SendRequest(BaseModel):
    """A validated email ready to be relayed.

    Attributes:
        to: Single recipient address, trimmed.
        subject: Subject line, trimmed and non-empty.
        body: HTML body, passed through untouched.
        attachments: Decoded attachments in input order.
    """

    model_config = ConfigDict(frozen=True)

    to: EmailStr = Field(..., description="Recipient email address")
    subject: str = Field(..., description="Email subject line")
    body: str = Field(..., description="HTML email body")
    attachments: list[Attachment] = Field(
        default_factory=list, description="Decoded attachments"
    )

    @field_validator("to", mode="before")
    @classmethod
    def strip_recipient(cls, v: object) -> object:
        """Trim the recipient and refuse the "Name <addr>" form."""
        if isinstance(v, str):
            v = v.strip()
            if "<" in v or ">" in v:
                raise ValueError("Recipient must be a bare email address")
        return v

    @field_validator("subject", mode="before")
    @classmethod
    def coerce_subject(cls, v: object) -> object:
        return scalar_to_text(v)

    @field_validator("body", mode="before")
    @classmethod
    def coerce_body(cls, v: object) -> object:
        """Accept any JSON value as the body; arrays and objects as JSON text."""
        v = scalar_to_text(v)
        if isinstance(v, (list, dict)):
            return json.dumps(v, ensure_ascii=False)
        return v

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v: str) -> str:
        """Validate subject is not empty or whitespace-only.

        Args:
            v: Subject line to validate.

        Returns:
            Trimmed subject line.

        Raises:
            ValueError: If subject is empty or only whitespace.
        """
        if not v.strip():
            raise ValueError("Subject cannot be empty")
        return v.strip()


class SendResult(BaseModel):
    """Outcome of one dispatch attempt.

    Attributes:
        success: Whether the upstream server accepted the message.
        message: Human-readable summary.
        error: Underlying SMTP diagnostic when the send failed.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    error: str | None = None

    @classmethod
    def sent(cls) -> SendResult:
        return cls(success=True, message="Email sent successfully")

    @classmethod
    def failed(cls, error: str) -> SendResult:
        return cls(success=False, message="Failed to send email", error=error)
