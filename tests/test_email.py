"""Unit tests for the SendGrid email transport."""

from __future__ import annotations

import json
import types

import pytest

from notification_dispatch.domain.entities import Message
from notification_dispatch.infrastructure.delivery import email as email_module


class DummySettings:
    sendgrid_api_key = "SG.fake"
    sendgrid_sender = "sender@example.com"


class SuccessfulClient:
    sent: list = []

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):
        SuccessfulClient.sent.append(message)
        return types.SimpleNamespace(status_code=202, body=None)


def _message(**overrides) -> Message:
    values = {
        "id": 1,
        "notification_id": 3,
        "notification_name": "Assignment Changed",
        "user_id": 1,
        "subject": "Assignment changed",
        "to": "student@example.com",
        "path_type": "email",
        "body": "Lab report changed\nSee details",
        "url": "https://lms.example.com/a?x=1&y=2",
    }
    values.update(overrides)
    return Message(**values)


def test_send_email_without_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    """When SendGrid settings are missing the helper should exit early."""

    class EmptySettings:
        sendgrid_api_key = None
        sendgrid_sender = None

    monkeypatch.setattr(email_module, "get_settings", lambda: EmptySettings())

    assert email_module.send_email("Subject", "<p>Body</p>", "user@example.com") is False


def test_send_email_success(monkeypatch: pytest.MonkeyPatch) -> None:
    """A successful SendGrid response should return ``True``."""

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", SuccessfulClient)

    assert email_module.send_email("Subject", "<p>Body</p>", "user@example.com") is True


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    """Forbidden responses from SendGrid should surface meaningful log details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {"errors": [{"message": "The provided authorization grant is invalid."}]}
        ).encode()

    class FailingClient(SuccessfulClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"):
        result = email_module.send_email("Subject", "<p>Body</p>", "user@example.com")

    assert result is False
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text


def test_send_email_rejects_non_success_status(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    class RejectingClient(SuccessfulClient):
        def send(self, message):
            body = {"errors": [{"message": "Invalid email", "field": "personalizations"}]}
            return types.SimpleNamespace(status_code=400, body=json.dumps(body))

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RejectingClient)

    with caplog.at_level("ERROR"):
        assert email_module.send_email("Subject", "<p>Body</p>", "bad") is False

    assert "Invalid email (field: personalizations)" in caplog.text


def test_render_message_html_escapes_content() -> None:
    html = email_module.render_message_html(_message(body="<b>Bold</b>\n\nNext"))

    assert html.startswith("<p>&lt;b&gt;Bold&lt;/b&gt;</p><p>Next</p>")
    assert 'href="https://lms.example.com/a?x=1&amp;y=2"' in html


def test_sender_delivers_through_sendgrid(monkeypatch: pytest.MonkeyPatch) -> None:
    SuccessfulClient.sent = []
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", SuccessfulClient)

    assert email_module.SendGridEmailSender().send(_message()) is True
    assert len(SuccessfulClient.sent) == 1


def test_sender_requires_a_recipient(caplog) -> None:
    with caplog.at_level("WARNING"):
        assert email_module.SendGridEmailSender().send(_message(to=None)) is False

    assert "has no recipient address" in caplog.text
