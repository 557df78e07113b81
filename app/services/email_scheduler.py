"""Scheduled customer emails.

Delivery is simulated: a due email is logged, stamped as sent and, when a
webhook is configured, announced to it.
"""
import logging
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import BookingStatus, EmailStatus, EmailType
from app.core.metrics import emails_processed
from app.db.repositories import ScheduledEmailRepository
from app.models.scheduled_email import ScheduledEmail
from app.services.webhook import send_webhook

logger = logging.getLogger(__name__)

SEND_AT = time(9, 0, tzinfo=timezone.utc)

SUBJECTS = {
    EmailType.REMINDER: "Reminder: your car pickup on {start:%b %d}",
    EmailType.FOLLOWUP: "How was your rental?",
    EmailType.REVIEW_REQUEST: "Tell us about your trip",
}

BODIES = {
    EmailType.REMINDER: (
        "Hi {name},\n\nThis is a reminder that your rental (confirmation {code}) "
        "starts on {start:%A, %B %d}. Please bring your driver's license and the "
        "card used for the booking.\n"
    ),
    EmailType.FOLLOWUP: (
        "Hi {name},\n\nThanks for renting with us. Your rental ended on "
        "{end:%B %d}; reply to this email if anything needs our attention.\n"
    ),
    EmailType.REVIEW_REQUEST: (
        "Hi {name},\n\nWe'd love to hear about your rental that ended on "
        "{end:%B %d}. Leaving a review takes less than a minute.\n"
    ),
}


def send_time(booking, email_type: EmailType, days: int) -> datetime:
    """Reminders go out ``days`` before pickup, the rest ``days`` after return."""
    if email_type == EmailType.REMINDER:
        day = booking.start_date - timedelta(days=days)
    else:
        day = booking.end_date + timedelta(days=days)
    return datetime.combine(day, SEND_AT)


async def schedule_email(db: AsyncSession, booking, email_type: EmailType, days: int) -> ScheduledEmail:
    if BookingStatus(booking.status) == BookingStatus.CANCELLED:
        raise HTTPException(status_code=409, detail="Cannot schedule emails for a cancelled booking")

    fields = {
        "name": booking.name,
        "code": booking.confirmation_code,
        "start": booking.start_date,
        "end": booking.end_date,
    }
    email = ScheduledEmail(
        booking_id=booking.id,
        type=email_type,
        recipient=booking.email,
        subject=SUBJECTS[email_type].format(**fields),
        body=BODIES[email_type].format(**fields),
        scheduled_for=send_time(booking, email_type, days),
        status=EmailStatus.SCHEDULED,
    )
    await ScheduledEmailRepository(db).add(email)
    await db.commit()
    await db.refresh(email)
    logger.info(f"Scheduled {email_type} email {email.id} for booking {booking.id} at {email.scheduled_for}")
    return email


async def cancel_email(db: AsyncSession, email: ScheduledEmail) -> ScheduledEmail:
    if EmailStatus(email.status) == EmailStatus.SENT:
        raise HTTPException(status_code=409, detail="Email has already been sent")
    email.status = EmailStatus.CANCELLED
    db.add(email)
    await db.commit()
    await db.refresh(email)
    return email


async def process_due_emails(db: AsyncSession, now: Optional[datetime] = None) -> List[ScheduledEmail]:
    """Deliver every scheduled email whose send time has passed."""
    now = now or datetime.now(timezone.utc)
    due = await ScheduledEmailRepository(db).due(now)
    for email in due:
        logger.info(f"Sending {email.type} email {email.id} to {email.recipient}: {email.subject}")
        email.status = EmailStatus.SENT
        email.sent_at = now
        emails_processed.labels(type=str(email.type)).inc()
    await db.commit()

    for email in due:
        await send_webhook({
            "event": "email_sent",
            "email_id": email.id,
            "booking_id": email.booking_id,
            "type": str(email.type),
            "recipient": email.recipient,
        })
    return due
