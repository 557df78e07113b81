from pydantic import BaseModel
from typing import Dict
from datetime import date
from decimal import Decimal


class CarAvailabilityRow(BaseModel):
    car_id: str
    car: str
    location_id: str
    price_per_day: Decimal
    total_days: int
    booked_days: int
    availability: float
    utilization: float


class FleetStatsOut(BaseModel):
    start_date: date
    end_date: date
    total_cars: int
    total_bookings: int
    previous_period_bookings: int
    percent_change: int
    total_revenue: Decimal
    average_revenue: Decimal
    average_utilization: float
    cars_by_type: Dict[str, int]
    cars_by_location: Dict[str, int]


class DailyPoint(BaseModel):
    date: date
    occupancy: float
    revenue: Decimal
    bookings: int


class UtilizationPoint(BaseModel):
    car_id: str
    car_name: str
    utilization: float


class CarTypePoint(BaseModel):
    type: str
    cars: int
    bookings: int
    revenue: Decimal
    occupancy: float
