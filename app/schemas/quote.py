from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from app.schemas.common import CalendarDate

class QuoteRequest(BaseModel):
    car_id: str
    start_date: CalendarDate
    end_date: CalendarDate
    include_tax: bool = True

class QuoteResponse(BaseModel):
    car_id: str
    start_date: date
    end_date: date
    days: int
    final_price: Decimal
    price_breakdown: dict
