"""Availability and pricing engine.

Every availability, day-count and base-price computation in the service goes
through this module. Ranges are inclusive on both ends at calendar-day
precision: a booking ending on day D and another starting on day D overlap,
since the car is in use for all of day D.

The functions are pure. Booking and car arguments only need the attributes
they read (``start_date``, ``end_date``, ``status``, ``car_id``, ``id`` for
bookings; ``id`` and ``price_per_day`` for cars), so ORM rows, pydantic
models and plain dataclasses are all accepted.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Iterator, List, Protocol, Set, Union

from app.core.enums import BookingStatus
from app.core.errors import InvalidRangeError

DateLike = Union[date, datetime, str]

BLOCKING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})
CENTS = Decimal("0.01")


class BookedSpan(Protocol):
    start_date: DateLike
    end_date: DateLike
    status: Union[BookingStatus, str]


class PricedCar(Protocol):
    id: str
    price_per_day: Union[Decimal, float, int]


def to_calendar_date(value: DateLike) -> date:
    """Normalize a date, datetime or ISO-8601 string to a calendar date.

    Time of day (and any UTC offset) is dropped, not converted.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise ValueError(f"Invalid ISO-8601 date: {value!r}")
    raise TypeError(f"Cannot interpret {type(value).__name__} as a date")


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    @classmethod
    def parse(cls, start: DateLike, end: DateLike) -> "DateRange":
        return cls(to_calendar_date(start), to_calendar_date(end))

    @classmethod
    def of(cls, booking: BookedSpan) -> "DateRange":
        return cls.parse(booking.start_date, booking.end_date)

    def validate(self) -> "DateRange":
        if self.end < self.start:
            raise InvalidRangeError(self.start, self.end)
        return self

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def clamp(self, window: "DateRange") -> "DateRange":
        return DateRange(max(self.start, window.start), min(self.end, window.end))


def is_blocking(booking: BookedSpan) -> bool:
    return BookingStatus(booking.status) in BLOCKING_STATUSES


def ranges_overlap(a: DateRange, b: DateRange) -> bool:
    return a.start <= b.end and b.start <= a.end


def find_conflicts(candidate: DateRange, existing_bookings: Iterable[BookedSpan]) -> list:
    """Blocking bookings whose span intersects ``candidate``.

    ``existing_bookings`` must already be restricted to a single car.
    """
    candidate.validate()
    return [
        booking for booking in existing_bookings
        if is_blocking(booking) and ranges_overlap(candidate, DateRange.of(booking))
    ]


def is_range_available(candidate: DateRange, existing_bookings: Iterable[BookedSpan]) -> bool:
    return not find_conflicts(candidate, existing_bookings)


def compute_duration(range_: DateRange) -> int:
    """Inclusive day count; a same-day rental is one day."""
    range_.validate()
    return (range_.end - range_.start).days + 1


def compute_price(car: PricedCar, range_: DateRange) -> Decimal:
    rate = Decimal(str(car.price_per_day))
    return (rate * compute_duration(range_)).quantize(CENTS, rounding=ROUND_HALF_UP)


def list_blocked_dates(bookings: Iterable[BookedSpan]) -> Set[date]:
    blocked: Set[date] = set()
    for booking in bookings:
        if not is_blocking(booking):
            continue
        span = DateRange.of(booking)
        if span.end < span.start:
            continue
        blocked.update(span.days())
    return blocked


def booked_days_in_window(bookings: Iterable[BookedSpan], window: DateRange) -> Set[date]:
    window.validate()
    return {day for day in list_blocked_dates(bookings) if window.start <= day <= window.end}


def compute_utilization(car: PricedCar, bookings: Iterable[BookedSpan], window: DateRange) -> float:
    """Percentage of days in ``window`` on which ``car`` is blocked."""
    total_days = compute_duration(window)
    if total_days <= 0:
        return 0.0
    own = [b for b in bookings if getattr(b, "car_id", car.id) == car.id]
    booked = len(booked_days_in_window(own, window))
    return booked / total_days * 100


def available_cars(cars: Iterable[PricedCar], bookings: Iterable[BookedSpan], candidate: DateRange) -> List:
    by_car: dict = {}
    for booking in bookings:
        by_car.setdefault(booking.car_id, []).append(booking)
    return [car for car in cars if is_range_available(candidate, by_car.get(car.id, []))]
