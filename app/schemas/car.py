from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from app.core.enums import Transmission, FuelType, CarType


class CarCreate(BaseModel):
    make: str = Field(min_length=1)
    model: str = Field(min_length=1)
    year: int = Field(ge=1900, le=2100)
    transmission: Transmission
    fuel_type: FuelType
    seats: int = Field(ge=1, le=10)
    price_per_day: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    location_id: str
    car_type: Optional[CarType] = None
    color: Optional[str] = None
    license_plate: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    available: bool = True


class CarUpdate(BaseModel):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(None, ge=1900, le=2100)
    transmission: Optional[Transmission] = None
    fuel_type: Optional[FuelType] = None
    seats: Optional[int] = Field(None, ge=1, le=10)
    price_per_day: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    location_id: Optional[str] = None
    car_type: Optional[CarType] = None
    color: Optional[str] = None
    license_plate: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    available: Optional[bool] = None


class CarOut(BaseModel):
    id: str
    make: str
    model: str
    year: int
    transmission: Transmission
    fuel_type: FuelType
    seats: int
    price_per_day: Decimal
    location_id: str
    car_type: Optional[CarType] = None
    color: Optional[str] = None
    license_plate: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    available: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class CarAvailabilityOut(BaseModel):
    car_id: str
    start_date: date
    end_date: date
    available: bool
    days: int
    total_price: Decimal
    conflicts: List[str] = []


class BlockedDatesOut(BaseModel):
    car_id: str
    dates: List[date]
