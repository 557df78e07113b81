from sqlalchemy import Column, String, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.core.enums import DocumentType


class Document(BaseModel):
    __tablename__ = "documents"
    booking_id = Column(ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    booking = relationship("Booking", backref="documents")
    type = Column(Enum(DocumentType), nullable=False)
    title = Column(String(120), nullable=False)
    filename = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
