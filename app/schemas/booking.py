from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from app.core.enums import BookingStatus
from app.schemas.common import CalendarDate


class BookingCreate(BaseModel):
    car_id: str
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = Field(min_length=1)
    location_id: str
    start_date: CalendarDate
    end_date: CalendarDate


class BookingReason(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class BookingOut(BaseModel):
    id: str
    car_id: Optional[str] = None
    customer_id: Optional[str] = None
    location_id: str
    name: str
    email: str
    phone: str
    start_date: date
    end_date: date
    status: BookingStatus
    total_price: Decimal
    confirmation_code: Optional[str] = None
    cancellation_reason: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
