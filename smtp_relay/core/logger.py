"""Centralized logging configuration for the SMTP relay.

Provides the logger factory used by every relay module, with console
output, optional rotating log files and a startup configuration summary.

Features:
    - Console handler (stdout) with a compact format
    - Optional rotating file handlers (main log + separate error log)
    - Per-package log levels
    - Startup summary with credentials masked

Author: Odiseo
Created: 2025-10-18
Version: 2.1.0
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from smtp_relay.config.settings import RelayConfig

# Global configuration
_ROOT_LOGGER: logging.Logger | None = None
_LOG_DIR = Path("./logs")
_LOG_FORMAT_DETAILED = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
)
_LOG_FORMAT_SIMPLE = "%(asctime)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Module-level logger configuration
_MODULE_LEVELS = {
    "smtp_relay.clients": logging.DEBUG,
    "smtp_relay.api": logging.INFO,
    "smtp_relay.config": logging.INFO,
}

# ============================================================================
# ANSI Color Codes
# ============================================================================
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "magenta": "\033[35m",
    "red": "\033[31m",
}


def mask_password(password: str) -> str:
    """Mask password for display, showing only first and last char.

    Args:
        password: Password to mask.

    Returns:
        Masked password string.
    """
    if not password:
        return "(not set)"
    if len(password) <= 2:
        return "***"
    return f"{password[0]}{'*' * (len(password) - 2)}{password[-1]}"


def print_config_summary(settings: "RelayConfig") -> None:
    """Print a formatted configuration summary organized by categories.

    Args:
        settings: RelayConfig instance with loaded configuration.
    """
    c = COLORS

    def _line(label: str, value: str, color: str = "cyan") -> None:
        print(f"  {c['dim']}│{c['reset']} {label:<26} {c[color]}{value}{c['reset']}")

    def _header(title: str, color: str) -> None:
        print(f"\n  {c[color]}▶ {title}{c['reset']}")
        print(f"  {c['dim']}├{'─' * 50}{c['reset']}")

    def _required(value: str) -> tuple[str, str]:
        return (value, "cyan") if value else ("(not set)", "yellow")

    print(f"{c['dim']}{'─' * 72}{c['reset']}")
    print(f"{c['cyan']}{c['bold']}  {settings.SERVICE_NAME}{c['reset']}")
    print(f"{c['dim']}{'─' * 72}{c['reset']}")

    _header("Service Configuration", "green")
    _line("Version", settings.SERVICE_VERSION)
    _line("Listen", f"{settings.API_HOST}:{settings.API_PORT}")
    _line("Route", settings.API_ROUTE_PATH)
    _line(
        "Require HTTPS",
        str(settings.REQUIRE_HTTPS).lower(),
        "green" if settings.REQUIRE_HTTPS else "yellow",
    )

    _header("SMTP Configuration", "magenta")
    _line("Host", *_required(settings.SMTP_HOST))
    _line("Port", str(settings.SMTP_PORT))
    _line("User", *_required(settings.SMTP_USERNAME))
    _line(
        "Password",
        mask_password(settings.SMTP_PASSWORD),
        "yellow" if not settings.SMTP_PASSWORD else "cyan",
    )
    _line("From", *_required(settings.SMTP_FROM))
    _line("Encryption", settings.encryption_mode.value)
    _line("Timeout", f"{settings.SMTP_TIMEOUT}s")

    _header("Logging Configuration", "yellow")
    _line("Level", settings.LOG_LEVEL, "green")
    _line("Log to File", str(settings.LOG_TO_FILE).lower())
    if settings.LOG_TO_FILE:
        _line("Directory", settings.LOG_DIR)
        _line("Max File Size", f"{settings.LOG_MAX_SIZE_MB} MB")
        _line("Backup Count", str(settings.LOG_BACKUP_COUNT))

    print(f"\n{c['dim']}{'─' * 72}{c['reset']}\n")


def setup_logging(
    log_dir: Path | None = None,
    log_level: str = "INFO",
    file_level: str = "DEBUG",
    console_level: str | None = None,
    enable_file: bool = False,
    max_size_mb: int = 10,
    backup_count: int = 5,
    settings: Optional["RelayConfig"] = None,
) -> None:
    """Configure root logger with console and optional file handlers.

    Should be called once at application startup.

    Args:
        log_dir: Directory for log files. Defaults to ./logs.
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file_level: File handler level (usually DEBUG for comprehensive logging).
        console_level: Console handler level (defaults to log_level).
        enable_file: Whether to write logs to files.
        max_size_mb: Size of a log file before rotation.
        backup_count: Number of rotated files to keep.
        settings: Optional RelayConfig for printing configuration summary.

    Example:
        setup_logging(log_level="INFO", enable_file=True, settings=config)
    """
    global _ROOT_LOGGER, _LOG_DIR

    _LOG_DIR = Path(log_dir) if log_dir else Path("./logs")

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(
        getattr(logging, (console_level or log_level).upper(), logging.INFO)
    )
    console_handler.setFormatter(
        logging.Formatter(_LOG_FORMAT_SIMPLE, datefmt=_DATE_FORMAT)
    )
    root_logger.addHandler(console_handler)

    if enable_file:
        _LOG_DIR.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            _LOG_DIR / "smtp_relay.log",
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(getattr(logging, file_level.upper(), logging.DEBUG))
        file_handler.setFormatter(
            logging.Formatter(_LOG_FORMAT_DETAILED, datefmt=_DATE_FORMAT)
        )
        root_logger.addHandler(file_handler)

        # Errors are also kept in smtp_relay.error.log
        error_handler = logging.handlers.RotatingFileHandler(
            _LOG_DIR / "smtp_relay.error.log",
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(
            logging.Formatter(_LOG_FORMAT_DETAILED, datefmt=_DATE_FORMAT)
        )
        root_logger.addHandler(error_handler)

    for module_name, level in _MODULE_LEVELS.items():
        logging.getLogger(module_name).setLevel(level)

    _ROOT_LOGGER = root_logger

    if settings:
        print_config_summary(settings)


def get_logger(name: str, log_level: str | None = None) -> logging.Logger:
    """Get a logger instance for a module.

    Call setup_logging() once at startup for full configuration.

    Args:
        name: Logger name (typically __name__ of calling module).
        log_level: Optional override for logger level (DEBUG, INFO, WARNING, ERROR).

    Returns:
        Logger instance ready for use.

    Example:
        from smtp_relay.core.logger import get_logger

        logger = get_logger(__name__)
        logger.info("Relaying email to user@example.com")
    """
    logger = logging.getLogger(name)

    if log_level:
        logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


def get_logs_directory() -> Path:
    """Get the logs directory path."""
    return _LOG_DIR


def log_context(
    operation: str,
    recipient: str | None = None,
    **kwargs,
) -> str:
    """Format a log context string with metadata.

    Args:
        operation: Operation name (e.g., "send", "validate").
        recipient: Recipient email if applicable.
        **kwargs: Additional context key-value pairs.

    Returns:
        Formatted context string for logging.

    Example:
        msg = log_context("send", recipient="user@example.com", attachments=2)
        logger.info(f"Starting: {msg}")
        # Output: Starting: send | →user@example.com (attachments=2)
    """
    context_parts = [operation]

    if recipient:
        context_parts.append(f"→{recipient}")

    context = " | ".join(context_parts)

    if kwargs:
        extra = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        context = f"{context} ({extra})"

    return context
