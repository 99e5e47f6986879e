"""Models module for the SMTP relay.

Defines Pydantic v2 models for send requests, attachments, dispatch
results and SMTP configuration.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from smtp_relay.models.attachment import Attachment, decode_attachments, decode_base64
from smtp_relay.models.email import EncryptionMode, SendRequest, SendResult
from smtp_relay.models.smtp_config import SMTPConfig

__all__ = [
    # Enums
    "EncryptionMode",
    # Models
    "Attachment",
    "SendRequest",
    "SendResult",
    "SMTPConfig",
    # Helpers
    "decode_attachments",
    "decode_base64",
]
