"""SMTP relay configuration with Pydantic v2.

Manages SMTP credentials, transport policy and logging settings loaded
from environment variables or .env file. The loaded object is frozen and
is passed explicitly to the components that need it.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from smtp_relay.core.exceptions import RelayConfigError
from smtp_relay.models.email import EncryptionMode
from smtp_relay.models.smtp_config import SMTPConfig

# Required settings in the order they are checked, with the short name
# reported to clients.
REQUIRED_SETTINGS = (
    ("SMTP_HOST", "host"),
    ("SMTP_USERNAME", "username"),
    ("SMTP_PASSWORD", "password"),
    ("SMTP_FROM", "from"),
)


class RelayConfig(BaseSettings):
    """SMTP relay configuration.

    Loads settings from environment variables and .env file using Pydantic v2.
    All settings are case-sensitive and immutable once loaded.

    Attributes:
        SERVICE_NAME: Name of the service.
        SERVICE_VERSION: Service version.
        API_HOST: Bind address of the HTTP server.
        API_PORT: Bind port of the HTTP server.
        API_ROUTE_PATH: Path of the relay endpoint.
        REQUIRE_HTTPS: Reject requests that did not arrive over HTTPS.
        TRUST_FORWARDED_PROTO: Honour X-Forwarded-Proto from a proxy.
        SMTP_HOST: SMTP server hostname.
        SMTP_PORT: SMTP server port (1-65535).
        SMTP_USERNAME: SMTP authentication username.
        SMTP_PASSWORD: SMTP authentication password.
        SMTP_FROM: Sender email address.
        SMTP_ENCRYPTION: "ssl"/"smtps" for implicit TLS, anything else for STARTTLS.
        SMTP_TIMEOUT: SMTP socket timeout in seconds.
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        LOG_TO_FILE: Whether to log to file.
        LOG_DIR: Directory for log files.
        LOG_MAX_SIZE_MB: Log file size before rotation.
        LOG_BACKUP_COUNT: Rotated log files to keep.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # ========================================================================
    # Service Configuration
    # ========================================================================
    SERVICE_NAME: str = Field(
        default="smtp-relay",
        description="Name of the service",
    )
    SERVICE_VERSION: str = Field(
        default="1.0.0",
        description="Service version",
    )
    API_HOST: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    API_PORT: int = Field(
        default=8001,
        ge=1,
        le=65535,
        description="API server port",
    )
    API_ROUTE_PATH: str = Field(
        default="/",
        pattern="^/",
        description="Path of the relay endpoint",
    )

    # ========================================================================
    # Transport Policy
    # ========================================================================
    REQUIRE_HTTPS: bool = Field(
        default=True,
        description="Reject requests that did not arrive over HTTPS",
    )
    TRUST_FORWARDED_PROTO: bool = Field(
        default=False,
        description="Treat X-Forwarded-Proto: https as a secure request",
    )

    # ========================================================================
    # SMTP Configuration
    # ========================================================================
    SMTP_HOST: str = Field(
        default="",
        description="SMTP server hostname",
    )
    SMTP_PORT: int = Field(
        default=465,
        ge=1,
        le=65535,
        description="SMTP server port",
    )
    SMTP_USERNAME: str = Field(
        default="",
        description="SMTP authentication username",
    )
    SMTP_PASSWORD: str = Field(
        default="",
        description="SMTP authentication password",
    )
    SMTP_FROM: str = Field(
        default="",
        description="Sender email address",
    )
    SMTP_ENCRYPTION: str = Field(
        default="ssl",
        description="Encryption mode: ssl/smtps or starttls",
    )
    SMTP_TIMEOUT: int = Field(
        default=30,
        ge=1,
        le=300,
        description="SMTP connection timeout in seconds",
    )

    # ========================================================================
    # Logging Configuration
    # ========================================================================
    LOG_LEVEL: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level",
    )
    LOG_TO_FILE: bool = Field(
        default=False,
        description="Whether to log to file",
    )
    LOG_DIR: str = Field(
        default="./logs",
        description="Directory for log files",
    )
    LOG_MAX_SIZE_MB: int = Field(
        default=10,
        gt=0,
        description="Maximum log file size in megabytes",
    )
    LOG_BACKUP_COUNT: int = Field(
        default=5,
        gt=0,
        description="Number of backup log files to keep",
    )

    @field_validator("SMTP_HOST", "SMTP_USERNAME", "SMTP_FROM")
    @classmethod
    def strip_value(cls, v: str) -> str:
        """Strip surrounding whitespace from host, user and sender."""
        return v.strip()

    @property
    def encryption_mode(self) -> EncryptionMode:
        """Encryption mode resolved from SMTP_ENCRYPTION."""
        return EncryptionMode.from_setting(self.SMTP_ENCRYPTION)

    def validate_smtp_config(self) -> None:
        """Validate that every required SMTP setting is present.

        Raises:
            RelayConfigError: Naming the first missing setting.
        """
        for field_name, key in REQUIRED_SETTINGS:
            value = getattr(self, field_name)
            if not value or not value.strip():
                raise RelayConfigError(
                    f"Missing required configuration: {key}", key=key
                )

    def get_smtp_config(self) -> SMTPConfig:
        """Build the SMTP client configuration.

        Returns:
            Validated SMTPConfig.

        Raises:
            RelayConfigError: If settings are missing or invalid.
        """
        self.validate_smtp_config()
        try:
            return SMTPConfig(
                host=self.SMTP_HOST,
                port=self.SMTP_PORT,
                username=self.SMTP_USERNAME,
                password=self.SMTP_PASSWORD,
                from_email=self.SMTP_FROM,
                encryption=self.encryption_mode,
                timeout=self.SMTP_TIMEOUT,
            )
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            raise RelayConfigError(
                f"Invalid SMTP configuration: {field}: {first['msg']}", key=field
            ) from e


def load_config(**overrides) -> RelayConfig:
    """Load the relay configuration from the environment.

    Args:
        **overrides: Explicit values taking precedence over the environment.

    Returns:
        Loaded RelayConfig.

    Raises:
        RelayConfigError: If a setting fails validation (e.g. a non-numeric port).
    """
    try:
        return RelayConfig(**overrides)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise RelayConfigError(
            f"Invalid configuration: {field}: {first['msg']}", key=field
        ) from e
