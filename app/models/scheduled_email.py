from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.core.enums import EmailType, EmailStatus


class ScheduledEmail(BaseModel):
    __tablename__ = "scheduled_emails"
    booking_id = Column(ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    booking = relationship("Booking", backref="scheduled_emails")
    type = Column(Enum(EmailType), nullable=False)
    recipient = Column(String(120), nullable=False)
    subject = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    scheduled_for = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(Enum(EmailStatus), default=EmailStatus.SCHEDULED, nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=True)
