"""API response schemas.

Pydantic models documenting the relay responses in the OpenAPI schema and
serialising the health check.

Version: 1.0.0
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SendEmailResponse(BaseModel):
    """Response of a successful relay."""

    success: bool = Field(description="Always true")
    message: str = Field(description="Status message")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(description="Error label")
    message: str | None = Field(default=None, description="Error detail")
    required: list[str] | None = Field(
        default=None, description="Required fields (missing-field errors only)"
    )


class HealthResponse(BaseModel):
    """Response model for GET /health endpoint."""

    status: str = Field(description="Overall service status")
    service: str = Field(description="Service name")
    email_provider: str = Field(description="SMTP configuration status")
    version: str = Field(description="Service version")
    timestamp: datetime = Field(default_factory=lambda: datetime.now())
