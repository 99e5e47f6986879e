"""Attachment model and base64 decoding.

Requests carry attachments as ``{"filename": ..., "content": <base64>}``
objects. Decoding is strict: any character outside the base64 alphabet
rejects the whole request before an SMTP connection is opened.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from smtp_relay.core.exceptions import PayloadValidationError

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class Attachment(BaseModel):
    """A decoded attachment.

    Attributes:
        filename: Name presented to the recipient.
        content: Raw decoded bytes.
    """

    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., description="Attachment file name")
    content: bytes = Field(..., description="Decoded attachment bytes")

    @property
    def content_type(self) -> str:
        """MIME type guessed from the filename."""
        guessed, _ = mimetypes.guess_type(self.filename)
        return guessed or DEFAULT_CONTENT_TYPE

    @property
    def maintype(self) -> str:
        return self.content_type.split("/", 1)[0]

    @property
    def subtype(self) -> str:
        return self.content_type.split("/", 1)[1]


def decode_base64(content: Any) -> bytes:
    """Strictly decode base64 attachment content.

    Line breaks and other whitespace are dropped and missing padding is
    restored; anything else outside the base64 alphabet is an error.

    Args:
        content: Encoded string from the request payload.

    Returns:
        Decoded bytes.

    Raises:
        ValueError: If content is not a string or not valid base64.
    """
    if not isinstance(content, str):
        raise ValueError("base64 content must be a string")

    compact = "".join(content.split())
    padding_needed = 4 - (len(compact) % 4)
    if padding_needed != 4:
        compact += "=" * padding_needed

    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 content: {e}") from e


def decode_attachments(raw: Any) -> list[Attachment]:
    """Decode the ``attachments`` field of a request payload.

    Anything other than a list is ignored. Entries that are not objects or
    lack ``content`` or ``filename`` are skipped; an entry whose content
    does not decode aborts the whole request.

    Args:
        raw: Value of the ``attachments`` key (may be None).

    Returns:
        Decoded attachments in input order.

    Raises:
        PayloadValidationError: If any present content is not valid base64.
    """
    if not isinstance(raw, list):
        return []

    attachments: list[Attachment] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        if entry.get("content") is None or entry.get("filename") is None:
            continue

        try:
            decoded = decode_base64(entry["content"])
        except ValueError as e:
            raise PayloadValidationError(
                "Invalid base64 attachment content"
            ) from e

        attachments.append(
            Attachment(filename=str(entry["filename"]), content=decoded)
        )

    return attachments
