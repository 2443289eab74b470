from datetime import datetime
from types import SimpleNamespace

from interviewguru import notifier, storage
from interviewguru.models import Candidate, Interview


class FakeSendGrid:
    instances = []
    status_code = 202

    def __init__(self, api_key):
        self.api_key = api_key
        self.messages = []
        FakeSendGrid.instances.append(self)

    def send(self, message):
        self.messages.append(message)
        return SimpleNamespace(status_code=self.status_code)


def test_send_email_without_api_key_is_a_no_op(monkeypatch):
    monkeypatch.setattr(notifier, "SENDGRID_API_KEY", "")
    monkeypatch.setattr(notifier, "SendGridAPIClient", FakeSendGrid)
    FakeSendGrid.instances.clear()

    assert notifier.send_email("a@example.com", "Hi", "Body") is False
    assert FakeSendGrid.instances == []


def test_send_email_through_sendgrid(monkeypatch):
    FakeSendGrid.instances.clear()
    monkeypatch.setattr(notifier, "SENDGRID_API_KEY", "SG.test")
    monkeypatch.setattr(notifier, "SendGridAPIClient", FakeSendGrid)

    assert notifier.send_email("ada@example.com", "Interview Scheduled", "See you") is True

    client = FakeSendGrid.instances[0]
    assert client.api_key == "SG.test"
    payload = client.messages[0].get()
    assert payload["from"]["email"] == notifier.EMAIL_FROM
    assert payload["personalizations"][0]["to"] == [{"email": "ada@example.com"}]
    assert payload["subject"] == "Interview Scheduled"
    assert payload["content"] == [{"type": "text/plain", "value": "See you"}]


def test_send_email_failure_returns_false(monkeypatch):
    class Refusing(FakeSendGrid):
        def send(self, message):
            raise ConnectionRefusedError("nope")

    monkeypatch.setattr(notifier, "SENDGRID_API_KEY", "SG.test")
    monkeypatch.setattr(notifier, "SendGridAPIClient", Refusing)
    assert notifier.send_email("ada@example.com", "Hi", "Body") is False


def test_send_email_rejected_status_returns_false(monkeypatch):
    class Rejecting(FakeSendGrid):
        status_code = 401

    monkeypatch.setattr(notifier, "SENDGRID_API_KEY", "SG.test")
    monkeypatch.setattr(notifier, "SendGridAPIClient", Rejecting)
    assert notifier.send_email("ada@example.com", "Hi", "Body") is False


def test_send_email_message_build_failure_returns_false(monkeypatch):
    def broken_mail(**kwargs):
        raise ValueError("bad header")

    monkeypatch.setattr(notifier, "SENDGRID_API_KEY", "SG.test")
    monkeypatch.setattr(notifier, "SendGridAPIClient", FakeSendGrid)
    monkeypatch.setattr(notifier, "Mail", broken_mail)
    assert notifier.send_email("ada@example.com", "Hi", "Body") is False


def test_dispatch_marks_sent_only_on_success(db, monkeypatch):
    notification = storage.create_notification(db, {
        "recipient_email": "ada@example.com",
        "type": "interview_reminder",
        "subject": "Reminder",
        "content": "Tomorrow at 10",
    })

    monkeypatch.setattr(notifier, "send_email", lambda *a: False)
    notifier.dispatch(db, notification)
    assert notification.sent is False
    assert notification.sent_at is None

    monkeypatch.setattr(notifier, "send_email", lambda *a: True)
    notifier.dispatch(db, notification)
    assert notification.sent is True
    assert notification.sent_at is not None


def test_interview_scheduled_message_omits_missing_location():
    candidate = Candidate(name="Ada Lovelace", position="Backend Engineer", email="ada@example.com")
    interview = Interview(
        scheduled_at=datetime(2026, 3, 10, 14, 0), duration=45, type="behavioral", location=None,
    )

    text = notifier.interview_scheduled_message(interview, candidate)

    assert text.startswith("Dear Ada Lovelace,")
    assert "Backend Engineer" in text
    assert "March 10 2026 at 14:00" in text
    assert "Type: behavioral" in text
    assert "Location" not in text


def test_notifications_endpoint_dispatches(client, sent_emails):
    response = client.post("/api/notifications", json={
        "recipientEmail": "ada@example.com",
        "type": "evaluation_complete",
        "subject": "Your evaluation",
        "content": "Thanks for interviewing.",
    })
    assert response.status_code == 201
    assert response.json()["sent"] is True
    assert sent_emails == [{
        "to": "ada@example.com", "subject": "Your evaluation", "text": "Thanks for interviewing.",
    }]

    assert client.get("/api/notifications", params={"sent": "true"}).json()[0]["type"] == "evaluation_complete"
    assert client.get("/api/notifications", params={"sent": "false"}).json() == []


def test_notification_requires_valid_email(client):
    response = client.post("/api/notifications", json={
        "recipientEmail": "not-an-email", "type": "x", "subject": "s", "content": "c",
    })
    assert response.status_code == 400


def test_notification_subject_with_line_break_is_rejected(client, sent_emails):
    response = client.post("/api/notifications", json={
        "recipientEmail": "ada@example.com",
        "type": "interview_reminder",
        "subject": "Reminder\nBcc: x@example.com",
        "content": "Tomorrow at 10",
    })
    assert response.status_code == 400
    assert sent_emails == []
    assert client.get("/api/notifications").json() == []
