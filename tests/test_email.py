"""Unit tests for the SendGrid email helpers and the notification mail sender."""

from __future__ import annotations

import json
import types

import pytest

from tracker.domain.entities import Actor, MailDeliveryRequest, MailRecipient
from tracker.infrastructure import email as email_module


class DummySettings:
    sendgrid_api_key = "SG.fake"
    sendgrid_sender = "sender@example.com"
    app_url = "https://tracker.example.com"


class UnconfiguredSettings(DummySettings):
    sendgrid_api_key = None
    sendgrid_sender = None


class SuccessfulClient:
    sent: list = []

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):
        SuccessfulClient.sent.append(message)
        return types.SimpleNamespace(status_code=202, body=None)


def _request(type_: str = "assigned", **overrides) -> MailDeliveryRequest:
    values = {
        "type": type_,
        "subject_entity": {"issue_number": 7, "title": "Fix login bug", "deadline": "2024-05-11", "priority": "high"},
        "actor": Actor(id="1", name="Grace"),
        "recipients": (
            MailRecipient(id=1, email="a@example.com", name="A"),
            MailRecipient(id=2, email="b@example.com", name="B"),
        ),
    }
    values.update(overrides)
    return MailDeliveryRequest(**values)


def test_send_email_without_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    """When SendGrid settings are missing the helper should exit early."""

    monkeypatch.setattr(email_module, "get_settings", lambda: UnconfiguredSettings())

    assert email_module.send_email("Subject", "<p>Body</p>", "user@example.com") is False


def test_send_email_success(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", SuccessfulClient)

    assert email_module.send_email("Subject", "<p>Body</p>", "user@example.com") is True


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    """Forbidden responses from SendGrid should surface meaningful log details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {
                "errors": [
                    {
                        "message": "The provided authorization grant is invalid.",
                        "help": "https://sendgrid.com/docs/for-developers/sending-email/authentication/",
                    }
                ]
            }
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


def test_send_email_rejects_non_2xx_response(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    class RejectingClient(SuccessfulClient):
        def send(self, message):
            return types.SimpleNamespace(status_code=400, body=b'{"errors": [{"message": "bad to"}]}')

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RejectingClient)

    with caplog.at_level("ERROR"):
        assert email_module.send_email("Subject", "<p>Body</p>", "user@example.com") is False
    assert "bad to" in caplog.text


@pytest.mark.parametrize(
    ("type_", "subject"),
    [
        ("issue_created", "Issue #7: Issue Created"),
        ("issue_closed", "Issue #7: Closed"),
        ("comment", "Issue #7: New Comment"),
        ("collaborator_add", "Issue #7: Added as Collaborator"),
        ("assigned", "Issue #7: Assigned to You"),
        ("deadline", "Issue #7: Deadline Tomorrow"),
        ("reminder", "Issue #7: Deadline Tomorrow"),
        ("task_assigned", "Task: Fix login bug - Assigned to You"),
    ],
)
def test_templates_by_type(monkeypatch: pytest.MonkeyPatch, type_: str, subject: str) -> None:
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())

    rendered_subject, html = email_module.render_notification_email(_request(type_))

    assert rendered_subject == subject
    assert "Fix login bug" in html


def test_links_are_absolute(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())

    _, html = email_module.render_notification_email(_request("assigned"))

    assert 'href="https://tracker.example.com/issues/7"' in html


def test_closing_message_is_escaped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())

    _, html = email_module.render_notification_email(
        _request("issue_closed", context={"closing_message": "<b>done</b>"})
    )

    assert "&lt;b&gt;done&lt;/b&gt;" in html


def test_mail_sender_sends_one_message_per_recipient(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    sent: list[tuple[str, str]] = []

    def fake_send(subject: str, html: str, recipient: str) -> bool:
        sent.append((subject, recipient))
        return True

    assert email_module.SendGridMailSender(send=fake_send).send(_request()) is True
    assert [recipient for _, recipient in sent] == ["a@example.com", "b@example.com"]


def test_mail_sender_reports_partial_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())

    sender = email_module.SendGridMailSender(send=lambda s, h, r: r == "a@example.com")

    assert sender.send(_request()) is False


def test_mail_sender_skips_unknown_type(caplog) -> None:
    calls: list = []
    sender = email_module.SendGridMailSender(send=lambda *args: calls.append(args) or True)

    with caplog.at_level("WARNING"):
        assert sender.send(_request("merge")) is False
    assert calls == []
    assert "unsupported type merge" in caplog.text
