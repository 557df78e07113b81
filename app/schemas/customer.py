from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal
from app.core.enums import CustomerStatus


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    status: Optional[CustomerStatus] = None


class CustomerOut(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    status: CustomerStatus
    total_bookings: int
    total_spent: Decimal
    created_at: datetime
    updated_at: Optional[datetime] = None
