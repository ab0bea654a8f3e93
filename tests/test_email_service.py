"""Tests for reminder processing and SMTP delivery (providers monkeypatched)."""

import smtplib
from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from app.models.notification import Notification
from app.models.profile import Profile
from app.models.reminder import Reminder
from app.services import email_service
from app.services.email_service import (
    EmailDeliveryError,
    SmtpSettings,
    process_due_reminders,
    reminder_html,
    reminder_subject,
    send_email_smtp,
)

NOW = datetime(2024, 3, 10, 9, 0)


@pytest.fixture
async def reminders(db):
    db.add_all([
        Profile(id="student-sam", email="sam@example.com", full_name="Sam <Student>"),
        Profile(id="student-kim", email="kim@example.com", full_name="Kim"),
    ])
    db.add_all([
        Reminder(recipient_id="student-sam", subject_title="Submit resume", reminder_type="due_date",
                 scheduled_for=NOW - timedelta(hours=1), due_date=NOW),
        Reminder(recipient_id="student-kim", subject_title="Mock interview", reminder_type="two_days_before",
                 scheduled_for=NOW - timedelta(minutes=5)),
        Reminder(recipient_id="student-sam", subject_title="Later", scheduled_for=NOW + timedelta(days=1)),
        Reminder(recipient_id="student-sam", subject_title="Already sent",
                 scheduled_for=NOW - timedelta(days=1), sent_at=NOW - timedelta(days=1)),
    ])
    await db.commit()


class TestProcessDueReminders:

    async def test_sends_only_due_unsent(self, db, reminders, monkeypatch):
        sent = []

        async def fake_send(client, to, subject, html):
            sent.append((to, subject))

        monkeypatch.setattr(email_service, "send_via_resend", fake_send)
        processed = await process_due_reminders(db, now=NOW)

        assert len(processed) == 2
        assert sent == [
            ("sam@example.com", "Due Today: Submit resume"),
            ("kim@example.com", "Due in 2 Days: Mock interview"),
        ]
        pending = (await db.execute(select(Reminder).where(Reminder.sent_at.is_(None)))).scalars().all()
        assert [r.subject_title for r in pending] == ["Later"]

        notifications = (await db.execute(select(Notification))).scalars().all()
        assert {n.user_id for n in notifications} == {"student-sam", "student-kim"}
        assert all(n.type == "reminder" for n in notifications)

    async def test_failure_does_not_block_others(self, db, reminders, monkeypatch):
        async def flaky_send(client, to, subject, html):
            if to == "sam@example.com":
                raise EmailDeliveryError("Failed to send email: 422")

        monkeypatch.setattr(email_service, "send_via_resend", flaky_send)
        processed = await process_due_reminders(db, now=NOW)
        assert len(processed) == 1

        # The failed one is retried on the next pass
        async def ok_send(client, to, subject, html):
            return None

        monkeypatch.setattr(email_service, "send_via_resend", ok_send)
        assert len(await process_due_reminders(db, now=NOW)) == 1
        assert await process_due_reminders(db, now=NOW) == []


class TestTemplates:

    def test_subject_by_type(self):
        assert reminder_subject(Reminder(subject_title="X", reminder_type="follow_up")) == "Reminder: X"

    def test_html_escapes_names(self):
        html = reminder_html(Reminder(subject_title="<b>Task</b>", reminder_type="due_date"), "Sam <Student>")
        assert "Sam &lt;Student&gt;" in html
        assert "&lt;b&gt;Task&lt;/b&gt;" in html


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def login(self, username, password):
        if password == "wrong":
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    def send_message(self, message):
        self.sent.append(message)


class TestSmtp:

    @pytest.fixture(autouse=True)
    def fake_smtp(self, monkeypatch):
        FakeSMTP.instances = []
        monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP)

    def settings(self, password="secret"):
        return SmtpSettings(host="smtp.example.com", port=465, username="coach", password=password,
                            sender_email="coach@example.com", sender_name="Coach Carol")

    async def test_sends_html_message(self):
        await send_email_smtp("sam@example.com", "Hello", "<p>Hi</p>", self.settings())
        message = FakeSMTP.instances[0].sent[0]
        assert message["From"] == "Coach Carol <coach@example.com>"
        assert message["To"] == "sam@example.com"

    async def test_auth_failure_raises(self):
        with pytest.raises(EmailDeliveryError):
            await send_email_smtp("sam@example.com", "Hello", "<p>Hi</p>", self.settings("wrong"))

    async def test_endpoint_maps_failure_to_bad_gateway(self, client, coach_headers):
        resp = await client.post(
            "/api/email/send",
            headers=coach_headers,
            json={"to": "sam@example.com", "subject": "Hi", "html": "<p>Hi</p>",
                  "smtp": {"host": "smtp.example.com", "username": "coach", "password": "wrong",
                           "sender_email": "coach@example.com"}},
        )
        assert resp.status_code == 502
