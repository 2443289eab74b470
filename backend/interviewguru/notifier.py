"""
Outbound e-mail for notifications.

A notification row is created first, then sent straight away. A failed
send leaves the row unsent; nothing retries it.
"""

import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from sqlalchemy.orm import Session

from . import storage
from .config import EMAIL_FROM, SENDGRID_API_KEY
from .models import Candidate, Interview, Notification

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, text: str) -> bool:
    """Send a plain-text e-mail through SendGrid. Returns False instead of raising."""
    if not SENDGRID_API_KEY:
        logger.warning("SENDGRID_API_KEY not configured; not sending '%s' to %s", subject, to)
        return False

    try:
        message = Mail(
            from_email=EMAIL_FROM,
            to_emails=to,
            subject=subject,
            plain_text_content=text,
        )
        response = SendGridAPIClient(SENDGRID_API_KEY).send(message)
    except Exception:
        logger.exception("Failed to send '%s' to %s", subject, to)
        return False

    if response.status_code >= 300:
        logger.error("SendGrid refused '%s' to %s: HTTP %s", subject, to, response.status_code)
        return False

    logger.info("Sent '%s' to %s", subject, to)
    return True


def dispatch(db: Session, notification: Notification) -> Notification:
    if send_email(notification.recipient_email, notification.subject, notification.content):
        return storage.mark_notification_sent(db, notification)
    return notification


def interview_scheduled_message(interview: Interview, candidate: Candidate) -> str:
    lines = [
        f"Dear {candidate.name},",
        "",
        f"Your interview for the {candidate.position} position has been scheduled "
        f"for {interview.scheduled_at:%A, %B %d %Y at %H:%M} UTC.",
        "",
        f"Duration: {interview.duration} minutes",
        f"Type: {interview.type}",
    ]
    if interview.location:
        lines.append(f"Location: {interview.location}")
    lines += [
        "",
        "Please be prepared and arrive on time.",
        "",
        "Best regards,",
        "InterviewGuru Team",
    ]
    return "\n".join(lines)


def notify_interview_scheduled(db: Session, interview: Interview, candidate: Candidate) -> Notification:
    notification = storage.create_notification(db, {
        "recipient_email": candidate.email,
        "type": "interview_scheduled",
        "subject": "Interview Scheduled",
        "content": interview_scheduled_message(interview, candidate),
    })
    return dispatch(db, notification)
