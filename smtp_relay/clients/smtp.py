"""SMTP client for email delivery.

Builds the outbound MIME message and relays it through the configured
upstream server. Every send opens its own authenticated connection and
closes it afterwards; nothing is shared between requests.

Features:
- Implicit TLS (SMTPS) or STARTTLS, resolved from configuration
- HTML body with named attachments
- Explicit SendResult instead of exceptions for delivery failures

Author: Odiseo
Version: 2.1.0
"""

from __future__ import annotations

import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formatdate, make_msgid

from smtp_relay.core.exceptions import SMTPClientError
from smtp_relay.core.logger import get_logger, log_context
from smtp_relay.models.email import EncryptionMode, SendRequest, SendResult
from smtp_relay.models.smtp_config import SMTPConfig

logger = get_logger(__name__)


class SMTPClient:
    """SMTP email delivery client.

    Attributes:
        config: SMTP configuration.
    """

    def __init__(self, smtp_config: SMTPConfig) -> None:
        """Initialize SMTP client.

        Args:
            smtp_config: SMTP configuration.
        """
        self.config = smtp_config
        logger.info(
            f"SMTP Client initialized: {self.config.host}:{self.config.port} "
            f"({self.config.encryption.value})"
        )

    def _create_connection(self) -> smtplib.SMTP:
        """Open and authenticate a new SMTP connection.

        Returns:
            Authenticated SMTP connection.

        Raises:
            SMTPClientError: If connecting, upgrading or authenticating fails.
        """
        smtp: smtplib.SMTP | None = None
        try:
            logger.debug(
                f"Connecting to SMTP: {self.config.host}:{self.config.port}"
            )
            context = ssl.create_default_context()

            if self.config.encryption == EncryptionMode.SMTPS:
                smtp = smtplib.SMTP_SSL(
                    self.config.host,
                    self.config.port,
                    timeout=self.config.timeout,
                    context=context,
                )
            else:
                smtp = smtplib.SMTP(
                    self.config.host,
                    self.config.port,
                    timeout=self.config.timeout,
                )
                logger.debug("Starting TLS...")
                smtp.ehlo()
                smtp.starttls(context=context)
                smtp.ehlo()

            logger.debug("Authenticating...")
            smtp.login(self.config.username, self.config.password)

            logger.debug("SMTP connection established")
            return smtp

        except (smtplib.SMTPException, OSError) as e:
            detail = self.describe_error(e)
            logger.error(f"Failed to establish SMTP connection: {detail}")
            if smtp is not None:
                self._close_connection(smtp)
            raise SMTPClientError(
                f"Failed to connect to SMTP server: {detail}", detail=detail
            ) from e

    @staticmethod
    def _close_connection(smtp: smtplib.SMTP) -> None:
        """Close an SMTP connection, ignoring errors from a dead peer."""
        try:
            smtp.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.debug(f"Error closing SMTP connection (non-critical): {e}")
            smtp.close()

    def build_message(self, request: SendRequest) -> EmailMessage:
        """Build the MIME message for a send request.

        Args:
            request: Validated send request.

        Returns:
            Message with an HTML body and the request's attachments in order.
        """
        msg = EmailMessage()
        msg["From"] = self.config.from_email
        msg["To"] = request.to
        msg["Subject"] = self.secure_header(request.subject)
        msg["Date"] = formatdate(localtime=True)
        msg["Message-ID"] = make_msgid(domain=self.config.from_email.split("@")[-1])
        msg.set_content(request.body, subtype="html", charset="utf-8")

        for attachment in request.attachments:
            msg.add_attachment(
                attachment.content,
                maintype=attachment.maintype,
                subtype=attachment.subtype,
                filename=self.secure_header(attachment.filename),
            )

        return msg

    def send(self, request: SendRequest) -> SendResult:
        """Send one email via SMTP.

        A single attempt is made; failures are reported in the result,
        never raised.

        Args:
            request: Validated send request.

        Returns:
            SendResult describing the outcome.
        """
        context = log_context(
            "send", recipient=request.to, attachments=len(request.attachments)
        )
        try:
            msg = self.build_message(request)
        except (ValueError, UnicodeError) as e:
            detail = self.describe_error(e)
            logger.error(f"Email sending failed: {context}: {detail}")
            return SendResult.failed(detail)

        try:
            smtp = self._create_connection()
        except SMTPClientError as e:
            logger.error(f"Email sending failed: {context}: {e.detail}")
            return SendResult.failed(e.detail)

        try:
            smtp.send_message(
                msg,
                from_addr=self.config.from_email,
                to_addrs=[request.to],
            )
        except (smtplib.SMTPException, OSError, ValueError) as e:
            detail = self.describe_error(e)
            logger.error(f"Email sending failed: {context}: {detail}")
            return SendResult.failed(detail)
        finally:
            self._close_connection(smtp)

        logger.info(f"Email sent: {context} - Subject: {request.subject[:50]}")
        return SendResult.sent()

    def validate_connection(self) -> bool:
        """Test SMTP connection and authentication.

        Returns:
            True if connection successful, False otherwise.
        """
        try:
            logger.info("Testing SMTP connection...")
            smtp = self._create_connection()
        except SMTPClientError as e:
            logger.error(f"SMTP connection test failed: {e.detail}")
            return False

        self._close_connection(smtp)
        logger.info("SMTP connection test successful")
        return True

    def send_test_email(self, test_recipient: str) -> SendResult:
        """Send a test email to verify configuration.

        Args:
            test_recipient: Email address to send test email to.

        Returns:
            SendResult of the test send.
        """
        logger.info(f"Sending test email to {test_recipient}...")
        return self.send(
            SendRequest(
                to=test_recipient,
                subject="SMTP Relay - Test Email",
                body="<h1>Test Email</h1><p>SMTP relay is working correctly.</p>",
            )
        )

    @staticmethod
    def secure_header(value: str) -> str:
        """Strip CR and LF so a value cannot start a new header line."""
        return value.replace("\r", "").replace("\n", "").strip()

    @staticmethod
    def describe_error(error: BaseException) -> str:
        """Render an SMTP failure as a readable diagnostic.

        Server replies become ``"<code> <text>"``; other failures use the
        exception text, falling back to the exception class name.
        """
        if isinstance(error, smtplib.SMTPResponseException):
            text = error.smtp_error
            if isinstance(text, bytes):
                text = text.decode("utf-8", errors="replace")
            return f"{error.smtp_code} {text}".strip()
        if isinstance(error, smtplib.SMTPRecipientsRefused):
            refused = ", ".join(
                f"{addr}: {code} {text.decode('utf-8', errors='replace') if isinstance(text, bytes) else text}"
                for addr, (code, text) in error.recipients.items()
            )
            return f"Recipient refused: {refused}"
        return str(error) or error.__class__.__name__
