from sqlalchemy import Column, String, Date, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.core.enums import BookingStatus


class Booking(BaseModel):
    __tablename__ = "bookings"

    car_id = Column(ForeignKey("cars.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_id = Column(ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    location_id = Column(ForeignKey("locations.id"), nullable=False)

    car = relationship("Car", backref="bookings")
    customer = relationship("Customer", backref="bookings")

    name = Column(String(120), nullable=False)
    email = Column(String(120), nullable=False)
    phone = Column(String(40), nullable=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    confirmation_code = Column(String(16), unique=True, index=True)
    cancellation_reason = Column(String(500), nullable=True)
    rejection_reason = Column(String(500), nullable=True)
