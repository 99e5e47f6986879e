#!/usr/bin/env python3
"""Validate SMTP relay configuration and connectivity.

Tests SMTP server reachability, TLS and authentication with the relay's
own configuration, and optionally sends a test email.

Usage:
    python -m smtp_relay.scripts.validate_smtp
    python -m smtp_relay.scripts.validate_smtp --verbose
    python -m smtp_relay.scripts.validate_smtp --test-email user@example.com
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from pydantic import ValidationError

from smtp_relay.clients.smtp import SMTPClient
from smtp_relay.config import RelayConfig, load_config
from smtp_relay.core.exceptions import RelayConfigError
from smtp_relay.core.logger import get_logger, mask_password, setup_logging

logger = get_logger(__name__)


def print_header() -> None:
    """Print script header."""
    print("\n" + "=" * 80)
    print("  📧 SMTP Relay Configuration Validator")
    print("=" * 80)


def print_footer() -> None:
    """Print script footer."""
    print("=" * 80 + "\n")


def print_config(config: RelayConfig) -> None:
    """Print loaded SMTP configuration (with credentials masked).

    Args:
        config: RelayConfig instance.
    """
    print("\n📋 Loaded Configuration:")
    print(f"  SMTP Host:      {config.SMTP_HOST or '(not set)'}")
    print(f"  SMTP Port:      {config.SMTP_PORT}")
    print(f"  SMTP Username:  {config.SMTP_USERNAME or '(not set)'}")
    print(f"  SMTP Password:  {mask_password(config.SMTP_PASSWORD)}")
    print(f"  SMTP From:      {config.SMTP_FROM or '(not set)'}")
    print(f"  Encryption:     {config.encryption_mode.value}")
    print(f"  Timeout:        {config.SMTP_TIMEOUT}s")
    print(f"  Require HTTPS:  {'Yes' if config.REQUIRE_HTTPS else 'No'}")


def validate_smtp_connection(client: SMTPClient) -> bool:
    """Validate SMTP connection.

    Returns:
        True if connection successful, False otherwise.
    """
    print("\n🧪 Testing SMTP Connection...")
    if client.validate_connection():
        print("✅ SMTP connection test PASSED")
        return True

    print("❌ SMTP connection test FAILED")
    return False


def send_test_email(client: SMTPClient, test_recipient: str) -> bool:
    """Send test email to verify configuration.

    Args:
        client: Configured SMTP client.
        test_recipient: Email address to send test to.

    Returns:
        True if test email sent successfully, False otherwise.
    """
    print(f"\n📧 Sending Test Email to: {test_recipient}")
    try:
        result = client.send_test_email(test_recipient)
    except ValidationError as e:
        logger.debug(f"Rejected test recipient: {e}")
        print(f"❌ Invalid test recipient address: {test_recipient}")
        return False

    if result.success:
        print(f"✅ Test email sent successfully to {test_recipient}")
        print("   Check your inbox for the test email!")
        return True

    print(f"❌ Failed to send test email to {test_recipient}: {result.error}")
    return False


def print_recommendations(success: bool, test_email_success: Optional[bool] = None) -> None:
    """Print recommendations based on test results.

    Args:
        success: Whether SMTP connection test passed.
        test_email_success: Whether test email was sent (None if not attempted).
    """
    print("\n" + "-" * 80)
    print("📌 Recommendations:")

    if not success:
        print("  → Check SMTP_HOST and SMTP_PORT are reachable from this machine")
        print("  → SMTP_ENCRYPTION=ssl expects implicit TLS (usually port 465)")
        print("  → SMTP_ENCRYPTION=starttls expects STARTTLS (usually port 587)")
        print("  → Verify SMTP_USERNAME / SMTP_PASSWORD")
    elif test_email_success is None:
        print("  ✅ SMTP configuration is valid and connection works!")
        print("  → Start the relay with: smtp-relay")
        print("  → Or optionally test with: --test-email your-email@example.com")
    elif test_email_success:
        print("  ✅ Relay is ready to accept requests")
    else:
        print("  → Connection works but the server rejected the message")
        print("  → Check that SMTP_FROM is allowed for SMTP_USERNAME")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for validation script.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = argparse.ArgumentParser(description="Validate SMTP relay configuration")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--test-email", metavar="ADDRESS", help="Send a test email")
    args = parser.parse_args(argv)

    setup_logging(log_level="DEBUG" if args.verbose else "WARNING")
    print_header()

    try:
        config = load_config()
        print_config(config)
        smtp_config = config.get_smtp_config()
    except RelayConfigError as e:
        print(f"\n❌ Configuration error: {e}")
        print_footer()
        return 1

    client = SMTPClient(smtp_config)
    success = validate_smtp_connection(client)

    test_email_success: Optional[bool] = None
    if success and args.test_email:
        test_email_success = send_test_email(client, args.test_email)

    print_recommendations(success, test_email_success)
    print_footer()

    if not success or test_email_success is False:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
