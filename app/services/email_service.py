"""
Outbound email.

- process_due_reminders: send every unsent reminder that has come due via the
  Resend HTTP API, marking each as sent. One failed reminder never blocks the rest.
- send_email_smtp: deliver a single HTML message over SMTP with per-call credentials.
"""

import asyncio
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from html import escape
from typing import List, Optional

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.models.notification import Notification
from app.models.profile import Profile
from app.models.reminder import Reminder
from app.utils.logger import get_logger

logger = get_logger()


class EmailDeliveryError(Exception):
    """Raised when an email provider refuses or fails to deliver a message."""


@dataclass
class SmtpSettings:
    host: str
    port: int
    username: str
    password: str
    sender_email: str
    sender_name: str = ""
    use_ssl: bool = True
    timeout: float = 15.0

    @property
    def from_header(self) -> str:
        if self.sender_name:
            return f"{self.sender_name} <{self.sender_email}>"
        return self.sender_email


def reminder_subject(reminder: Reminder) -> str:
    if reminder.reminder_type == 'due_date':
        return f"Due Today: {reminder.subject_title}"
    if reminder.reminder_type == 'two_days_before':
        return f"Due in 2 Days: {reminder.subject_title}"
    return f"Reminder: {reminder.subject_title}"


def reminder_html(reminder: Reminder, full_name: str) -> str:
    parts = [
        "<h2>Reminder</h2>",
        f"<p>Hello {escape(full_name or '')},</p>",
        "<p>This is a reminder about:</p>",
        f"<h3>{escape(reminder.subject_title)}</h3>",
    ]
    if reminder.body:
        parts.append(f"<p>{escape(reminder.body)}</p>")
    if reminder.due_date:
        parts.append(f"<p><strong>Due Date:</strong> {reminder.due_date.strftime('%b %d, %Y')}</p>")
    return "\n".join(parts)


async def send_via_resend(client: httpx.AsyncClient, to: str, subject: str, html: str) -> None:
    settings = get_settings()
    resp = await client.post(
        settings.resend_api_url,
        headers={
            "Authorization": f"Bearer {settings.resend_api_key}",
            "Content-Type": "application/json",
        },
        json={"from": settings.reminder_sender, "to": to, "subject": subject, "html": html},
        timeout=15.0,
    )
    if resp.status_code >= 300:
        raise EmailDeliveryError(f"Failed to send email: {resp.status_code} {resp.text}")


async def process_due_reminders(db: AsyncSession, now: Optional[datetime] = None) -> List[int]:
    """
    Send reminders whose scheduled time has passed and that were never sent.

    Returns:
        ids of the reminders sent in this pass
    """
    now = now or datetime.utcnow()
    result = await db.execute(
        select(Reminder, Profile)
        .join(Profile, Profile.id == Reminder.recipient_id)
        .where(Reminder.sent_at.is_(None), Reminder.scheduled_for <= now)
        .order_by(Reminder.scheduled_for.asc())
    )
    due = result.all()

    processed: List[int] = []
    async with httpx.AsyncClient() as client:
        for reminder, profile in due:
            reminder_id = reminder.id
            try:
                await send_via_resend(
                    client,
                    to=profile.email,
                    subject=reminder_subject(reminder),
                    html=reminder_html(reminder, profile.full_name),
                )
            except (httpx.HTTPError, EmailDeliveryError) as e:
                logger.error(
                    f"Failed to process reminder {reminder_id}: {e}",
                    extra={"reminder_id": reminder_id, "error": str(e)[:500]},
                )
                continue

            reminder.sent_at = datetime.utcnow()
            db.add(Notification(
                user_id=profile.id,
                title=reminder.subject_title,
                message=reminder.body or reminder_subject(reminder),
                type='reminder',
            ))
            await db.commit()
            processed.append(reminder_id)

    if processed:
        logger.info(f"Processed {len(processed)} reminders", extra={"sent": len(processed)})
    return processed


def _send_smtp_blocking(message: EmailMessage, smtp: SmtpSettings) -> None:
    if smtp.use_ssl:
        with smtplib.SMTP_SSL(smtp.host, smtp.port, timeout=smtp.timeout) as server:
            server.login(smtp.username, smtp.password)
            server.send_message(message)
    else:
        with smtplib.SMTP(smtp.host, smtp.port, timeout=smtp.timeout) as server:
            server.starttls()
            server.login(smtp.username, smtp.password)
            server.send_message(message)


async def send_email_smtp(to: str, subject: str, html: str, smtp: SmtpSettings) -> None:
    """Send one HTML email over SMTP. Raises EmailDeliveryError on failure."""
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = smtp.from_header
    message["To"] = to
    message.set_content(html)
    message.add_alternative(html, subtype="html")

    try:
        await asyncio.to_thread(_send_smtp_blocking, message, smtp)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed sending email to {to}: {e}")
        raise EmailDeliveryError(str(e)) from e

    logger.info(f"Sent email to {to}")
