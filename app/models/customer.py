from sqlalchemy import Column, String, Integer, Numeric, Enum
from app.models.base import BaseModel
from app.core.enums import CustomerStatus


class Customer(BaseModel):
    __tablename__ = "customers"
    name = Column(String(120), nullable=False)
    email = Column(String(120), nullable=False, unique=True, index=True)
    phone = Column(String(40))
    address = Column(String(255))
    city = Column(String(120))
    state = Column(String(40))
    zip_code = Column(String(20))
    country = Column(String(80))
    status = Column(Enum(CustomerStatus), default=CustomerStatus.ACTIVE, nullable=False)
    total_bookings = Column(Integer, default=0, nullable=False)
    total_spent = Column(Numeric(12, 2), default=0, nullable=False)
