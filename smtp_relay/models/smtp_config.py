"""SMTP configuration model.

Defines the Pydantic model handed to the SMTP client.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from smtp_relay.models.email import EncryptionMode


class SMTPConfig(BaseModel):
    """SMTP server configuration model.

    Validates and stores SMTP connection parameters.

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port (1-65535).
        username: SMTP authentication username.
        password: SMTP authentication password.
        from_email: Sender email address.
        encryption: Resolved transport encryption.
        timeout: Socket timeout in seconds.
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1, description="SMTP server hostname")
    port: int = Field(..., ge=1, le=65535, description="SMTP server port")
    username: str = Field(..., min_length=1, description="SMTP authentication username")
    password: str = Field(..., description="SMTP authentication password")
    from_email: EmailStr = Field(..., description="Sender email address")
    encryption: EncryptionMode = Field(
        default=EncryptionMode.SMTPS, description="Transport encryption"
    )
    timeout: int = Field(
        default=30, ge=1, le=300, description="Connection timeout (seconds)"
    )

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate password is not empty.

        Raises:
            ValueError: If password is empty or whitespace.
        """
        if not v or not v.strip():
            raise ValueError("SMTP password cannot be empty")
        return v
