"""Unit tests for the mail dispatch handler.

Tests the validation pipeline and outcome mapping without a web server.

Author: Odiseo
Version: 1.0.0
"""

from __future__ import annotations

import json

import pytest

from smtp_relay.api.handler import InboundRequest, MailDispatchHandler
from smtp_relay.models.email import SendResult


def post(payload, is_secure: bool = True) -> InboundRequest:
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    return InboundRequest(method="POST", body=body, is_secure=is_secure)


@pytest.fixture
def handler(relay_config, mock_sender) -> MailDispatchHandler:
    return MailDispatchHandler(relay_config, mock_sender)


class TestTransportGuard:
    """Tests for HTTPS and method enforcement."""

    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"])
    def test_non_post_rejected(self, handler, mock_sender, sample_payload, method):
        """Test non-POST methods get 405 regardless of body."""
        request = InboundRequest(
            method=method, body=json.dumps(sample_payload).encode(), is_secure=True
        )

        response = handler.handle(request)

        assert response.status_code == 405
        assert response.payload == {"error": "Method not allowed. Use POST."}
        mock_sender.send.assert_not_called()

    def test_https_required(self, handler, mock_sender):
        """Test plain HTTP is rejected before the body is parsed."""
        response = handler.handle(post(b"{not json", is_secure=False))

        assert response.status_code == 400
        assert response.payload == {"error": "HTTPS required"}
        mock_sender.send.assert_not_called()

    def test_https_checked_before_method(self, handler):
        """Test the HTTPS check runs before the method check."""
        response = handler.handle(InboundRequest(method="GET", is_secure=False))

        assert response.status_code == 400
        assert response.payload == {"error": "HTTPS required"}

    def test_plain_http_allowed_when_not_required(
        self, config_factory, mock_sender, sample_payload
    ):
        """Test REQUIRE_HTTPS=false accepts plain HTTP."""
        handler = MailDispatchHandler(
            config_factory(REQUIRE_HTTPS=False), mock_sender
        )

        response = handler.handle(post(sample_payload, is_secure=False))

        assert response.status_code == 200


class TestPayloadValidation:
    """Tests for JSON and field validation."""

    @pytest.mark.parametrize("body", [b"", b"{", b"not json", b'{"to": }', b"\xff\xfe"])
    def test_invalid_json(self, handler, mock_sender, body):
        """Test unparseable bodies return the parser diagnostic."""
        response = handler.handle(post(body))

        assert response.status_code == 400
        assert response.payload["error"] == "Invalid JSON"
        assert response.payload["message"]
        mock_sender.send.assert_not_called()

    def test_deeply_nested_json(self, handler, mock_sender):
        """Test nesting beyond the parser limit is reported as invalid JSON."""
        response = handler.handle(post(b"[" * 100000))

        assert response.status_code == 400
        assert response.payload["error"] == "Invalid JSON"
        assert response.payload["message"]
        mock_sender.send.assert_not_called()

    def test_lone_surrogate_is_invalid_json(self, handler, mock_sender):
        """Test a \\u escape decoding to an unpaired surrogate is rejected."""
        body = b'{"to": "user@example.com", "subject": "Hi", "body": "\\ud800"}'

        response = handler.handle(post(body))

        assert response.status_code == 400
        assert response.payload["error"] == "Invalid JSON"
        mock_sender.send.assert_not_called()

    @pytest.mark.parametrize("missing", ["to", "subject", "body"])
    def test_missing_required_field(self, handler, sample_payload, missing):
        """Test each missing field lists all three required fields."""
        del sample_payload[missing]

        response = handler.handle(post(sample_payload))

        assert response.status_code == 400
        assert response.payload == {
            "error": "Missing required fields",
            "required": ["to", "subject", "body"],
        }

    def test_null_field_is_missing(self, handler, sample_payload):
        """Test a null value counts as missing."""
        sample_payload["body"] = None

        response = handler.handle(post(sample_payload))

        assert response.payload["error"] == "Missing required fields"

    @pytest.mark.parametrize("payload", [[], [1, 2], "text", 42, None])
    def test_non_object_payload(self, handler, payload):
        """Test JSON that is not an object is treated as missing fields."""
        response = handler.handle(post(payload))

        assert response.status_code == 400
        assert response.payload["error"] == "Missing required fields"

    def test_invalid_email(self, handler, mock_sender, sample_payload):
        sample_payload["to"] = "not-an-email"

        response = handler.handle(post(sample_payload))

        assert response.status_code == 400
        assert response.payload == {"error": "Invalid email address"}
        mock_sender.send.assert_not_called()

    def test_non_string_email(self, handler, sample_payload):
        sample_payload["to"] = ["user@example.com"]

        response = handler.handle(post(sample_payload))

        assert response.payload == {"error": "Invalid email address"}

    def test_recipient_is_trimmed(self, handler, mock_sender, sample_payload):
        sample_payload["to"] = "  user@example.com  "

        response = handler.handle(post(sample_payload))

        assert response.status_code == 200
        sent = mock_sender.send.call_args[0][0]
        assert sent.to == "user@example.com"

    def test_whitespace_subject(self, handler, mock_sender, sample_payload):
        sample_payload["subject"] = "   "

        response = handler.handle(post(sample_payload))

        assert response.status_code == 400
        assert response.payload == {"error": "Subject cannot be empty"}
        mock_sender.send.assert_not_called()

    def test_email_checked_before_subject(self, handler, sample_payload):
        """Test an invalid address is reported ahead of an empty subject."""
        sample_payload["to"] = "not-an-email"
        sample_payload["subject"] = ""

        response = handler.handle(post(sample_payload))

        assert response.payload == {"error": "Invalid email address"}

    @pytest.mark.parametrize("body,expected", [
        (42, "42"),
        (1.5, "1.5"),
        (True, "1"),
        (False, ""),
        ({"html": "<p>Hi</p>"}, '{"html": "<p>Hi</p>"}'),
    ])
    def test_non_string_body_is_sent_as_text(
        self, handler, mock_sender, sample_payload, body, expected
    ):
        """Test any JSON body is relayed, rendered as text."""
        sample_payload["body"] = body

        response = handler.handle(post(sample_payload))

        assert response.status_code == 200
        assert mock_sender.send.call_args[0][0].body == expected

    def test_numeric_subject_is_sent_as_text(self, handler, mock_sender, sample_payload):
        sample_payload["subject"] = 42

        response = handler.handle(post(sample_payload))

        assert response.status_code == 200
        assert mock_sender.send.call_args[0][0].subject == "42"

    @pytest.mark.parametrize("subject", [False, ["Hi"]])
    def test_unusable_subject(self, handler, mock_sender, sample_payload, subject):
        sample_payload["subject"] = subject

        response = handler.handle(post(sample_payload))

        assert response.payload == {"error": "Subject cannot be empty"}
        mock_sender.send.assert_not_called()

    def test_named_recipient_rejected(self, handler, mock_sender, sample_payload):
        """Test the "Name <addr>" form is not taken as a single address."""
        sample_payload["to"] = "User <user@example.com>"

        response = handler.handle(post(sample_payload))

        assert response.payload == {"error": "Invalid email address"}
        mock_sender.send.assert_not_called()

    def test_empty_body_is_allowed(self, handler, sample_payload):
        sample_payload["body"] = ""

        response = handler.handle(post(sample_payload))

        assert response.status_code == 200


class TestAttachments:
    """Tests for attachment handling in the pipeline."""

    def test_invalid_base64_aborts_before_dispatch(
        self, handler, mock_sender, sample_payload
    ):
        """Test bad attachment content never reaches the SMTP client."""
        sample_payload["attachments"] = [
            {"filename": "bad.txt", "content": "not-base64!!"}
        ]

        response = handler.handle(post(sample_payload))

        assert response.status_code == 400
        assert response.payload == {"error": "Invalid base64 attachment content"}
        mock_sender.send.assert_not_called()

    def test_attachments_forwarded(
        self, handler, mock_sender, sample_payload, sample_attachment
    ):
        sample_payload["attachments"] = [sample_attachment, {"filename": "skipped"}]

        response = handler.handle(post(sample_payload))

        assert response.status_code == 200
        sent = mock_sender.send.call_args[0][0]
        assert len(sent.attachments) == 1
        assert sent.attachments[0].filename == "hello.txt"
        assert sent.attachments[0].content == b"Hello World!"

    def test_subject_checked_before_attachments(self, handler, sample_payload):
        sample_payload["subject"] = ""
        sample_payload["attachments"] = [{"filename": "x", "content": "!!"}]

        response = handler.handle(post(sample_payload))

        assert response.payload == {"error": "Subject cannot be empty"}


class TestDispatch:
    """Tests for outcome mapping."""

    def test_success(self, handler, mock_sender, sample_payload):
        response = handler.handle(post(sample_payload))

        assert response.status_code == 200
        assert response.payload == {
            "success": True,
            "message": "Email sent successfully",
        }
        mock_sender.send.assert_called_once()
        sent = mock_sender.send.call_args[0][0]
        assert sent.to == "user@example.com"
        assert sent.subject == "Test Email"
        assert sent.body == "<h1>Hello</h1><p>Test body</p>"

    def test_send_failure(self, handler, mock_sender, sample_payload):
        """Test a failed send maps to 500 with the SMTP diagnostic."""
        mock_sender.send.return_value = SendResult.failed(
            "535 5.7.8 Authentication failed"
        )

        response = handler.handle(post(sample_payload))

        assert response.status_code == 500
        assert response.payload == {
            "error": "Failed to send email",
            "message": "535 5.7.8 Authentication failed",
        }

    def test_no_deduplication(self, handler, mock_sender, sample_payload):
        """Test identical requests trigger independent sends."""
        handler.handle(post(sample_payload))
        handler.handle(post(sample_payload))

        assert mock_sender.send.call_count == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
