from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from app.schemas.quote import QuoteResponse
from app.services.availability import CENTS, DateRange, PricedCar, compute_duration, compute_price
from app.core.config import settings


def apply_tax(subtotal: Decimal, rate: Optional[Decimal] = None) -> Decimal:
    rate = settings.TAX_RATE if rate is None else rate
    return (subtotal * rate).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_quote(car: PricedCar, range_: DateRange, include_tax: bool = True) -> QuoteResponse:
    """Rental price for a car over a date range.

    The engine's base price is the subtotal; tax is a separate line on top.
    """
    days = compute_duration(range_)
    subtotal = compute_price(car, range_)
    tax = apply_tax(subtotal) if include_tax else Decimal("0.00")

    breakdown = {
        "price_per_day": Decimal(str(car.price_per_day)).quantize(CENTS),
        "days": days,
        "subtotal": subtotal,
        "tax_rate": settings.TAX_RATE if include_tax else Decimal("0"),
        "tax": tax,
    }
    return QuoteResponse(
        car_id=car.id,
        start_date=range_.start,
        end_date=range_.end,
        days=days,
        final_price=subtotal + tax,
        price_breakdown=breakdown,
    )
