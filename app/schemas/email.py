from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.core.enums import EmailType, EmailStatus


class ScheduleEmailRequest(BaseModel):
    booking_id: str
    type: EmailType
    days: int = Field(2, ge=1, le=30)


class ScheduledEmailOut(BaseModel):
    id: str
    booking_id: str
    type: EmailType
    recipient: str
    subject: str
    scheduled_for: datetime
    status: EmailStatus
    sent_at: Optional[datetime] = None
    created_at: datetime


class ProcessEmailsOut(BaseModel):
    processed: int
    sent_ids: list[str]
