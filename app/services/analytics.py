"""Fleet analytics derived from the availability engine.

Occupancy, utilization and availability all use the engine's blocking rule
(pending and confirmed bookings), so the dashboard, the calendar and the
booking check agree on which days a car is taken.
"""
import csv
import io
from collections import defaultdict
from datetime import timedelta
from decimal import Decimal
from typing import Dict, Iterable, List

from app.core.enums import BookingStatus
from app.schemas.analytics import (
    CarAvailabilityRow,
    CarTypePoint,
    DailyPoint,
    FleetStatsOut,
    UtilizationPoint,
)
from app.services.availability import (
    CENTS,
    DateRange,
    booked_days_in_window,
    compute_duration,
    compute_price,
    compute_utilization,
    is_blocking,
    ranges_overlap,
)


def _by_car(bookings: Iterable) -> Dict[str, list]:
    grouped = defaultdict(list)
    for booking in bookings:
        grouped[booking.car_id].append(booking)
    return grouped


def car_label(car) -> str:
    return f"{car.make} {car.model} ({car.year})"


def fleet_availability(cars: List, bookings: List, window: DateRange) -> List[CarAvailabilityRow]:
    total_days = compute_duration(window)
    grouped = _by_car(bookings)
    rows = []
    for car in cars:
        own = grouped.get(car.id, [])
        booked = len(booked_days_in_window(own, window))
        rows.append(CarAvailabilityRow(
            car_id=car.id,
            car=car_label(car),
            location_id=car.location_id,
            price_per_day=car.price_per_day,
            total_days=total_days,
            booked_days=booked,
            availability=round((total_days - booked) / total_days * 100, 1),
            utilization=round(compute_utilization(car, own, window), 1),
        ))
    return rows


def previous_period(window: DateRange) -> DateRange:
    length = compute_duration(window)
    end = window.start - timedelta(days=1)
    return DateRange(end - timedelta(days=length - 1), end)


def percent_change(current: int, previous: int) -> int:
    if previous == 0:
        return 100 if current else 0
    return round((current - previous) / previous * 100)


def fleet_stats(cars: List, bookings: List, window: DateRange) -> FleetStatsOut:
    """Headline numbers for the admin dashboard.

    Bookings are attributed to the period in which they start; cancelled
    bookings are left out of counts and revenue.
    """
    prev = previous_period(window)
    active = [b for b in bookings if BookingStatus(b.status) != BookingStatus.CANCELLED]
    current = [b for b in active if window.start <= b.start_date <= window.end]
    previous = [b for b in active if prev.start <= b.start_date <= prev.end]

    revenue = sum((Decimal(str(b.total_price)) for b in current), Decimal("0.00"))
    average = (revenue / len(current)).quantize(CENTS) if current else Decimal("0.00")

    grouped = _by_car(bookings)
    utilizations = [compute_utilization(car, grouped.get(car.id, []), window) for car in cars]

    cars_by_type: Dict[str, int] = defaultdict(int)
    cars_by_location: Dict[str, int] = defaultdict(int)
    for car in cars:
        cars_by_type[str(car.car_type) if car.car_type else "other"] += 1
        cars_by_location[car.location_id] += 1

    return FleetStatsOut(
        start_date=window.start,
        end_date=window.end,
        total_cars=len(cars),
        total_bookings=len(current),
        previous_period_bookings=len(previous),
        percent_change=percent_change(len(current), len(previous)),
        total_revenue=revenue.quantize(CENTS),
        average_revenue=average,
        average_utilization=round(sum(utilizations) / len(utilizations), 1) if utilizations else 0.0,
        cars_by_type=dict(cars_by_type),
        cars_by_location=dict(cars_by_location),
    )


def daily_series(cars: List, bookings: List, window: DateRange) -> List[DailyPoint]:
    cars_by_id = {car.id: car for car in cars}
    day_cars: Dict = defaultdict(set)
    day_bookings: Dict = defaultdict(int)
    for booking in bookings:
        if not is_blocking(booking) or booking.car_id not in cars_by_id:
            continue
        span = DateRange.of(booking)
        if not ranges_overlap(span, window):
            continue
        for day in span.clamp(window).days():
            day_cars[day].add(booking.car_id)
            day_bookings[day] += 1

    points = []
    for day in window.days():
        occupied = day_cars.get(day, set())
        revenue = sum((Decimal(str(cars_by_id[c].price_per_day)) for c in occupied), Decimal("0.00"))
        points.append(DailyPoint(
            date=day,
            occupancy=round(len(occupied) / len(cars) * 100, 1) if cars else 0.0,
            revenue=revenue.quantize(CENTS),
            bookings=day_bookings.get(day, 0),
        ))
    return points


def utilization_series(cars: List, bookings: List, window: DateRange) -> List[UtilizationPoint]:
    grouped = _by_car(bookings)
    return [
        UtilizationPoint(
            car_id=car.id,
            car_name=f"{car.make} {car.model}",
            utilization=round(compute_utilization(car, grouped.get(car.id, []), window), 1),
        )
        for car in cars
    ]


def car_type_breakdown(cars: List, bookings: List, window: DateRange) -> List[CarTypePoint]:
    total_days = compute_duration(window)
    grouped = _by_car(bookings)
    buckets: Dict[str, dict] = {}
    for car in cars:
        key = str(car.car_type) if car.car_type else "other"
        bucket = buckets.setdefault(key, {"cars": 0, "bookings": 0, "revenue": Decimal("0.00"), "days": 0})
        bucket["cars"] += 1
        own = grouped.get(car.id, [])
        bucket["days"] += len(booked_days_in_window(own, window))
        for booking in own:
            span = DateRange.of(booking)
            if not is_blocking(booking) or not ranges_overlap(span, window):
                continue
            bucket["bookings"] += 1
            bucket["revenue"] += compute_price(car, span.clamp(window))

    return [
        CarTypePoint(
            type=key,
            cars=b["cars"],
            bookings=b["bookings"],
            revenue=b["revenue"].quantize(CENTS),
            occupancy=round(b["days"] / (b["cars"] * total_days) * 100, 1),
        )
        for key, b in sorted(buckets.items())
    ]


CSV_COLUMNS = [
    "Car", "Location", "Transmission", "Fuel Type", "Seats", "Price/Day",
    "Availability %", "Total Days", "Booked Days",
]


def fleet_availability_csv(cars: List, rows: List[CarAvailabilityRow], location_names: Dict[str, str]) -> str:
    cars_by_id = {car.id: car for car in cars}
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for row in rows:
        car = cars_by_id[row.car_id]
        writer.writerow([
            row.car,
            location_names.get(car.location_id, car.location_id),
            str(car.transmission),
            str(car.fuel_type),
            car.seats,
            row.price_per_day,
            f"{row.availability:.1f}",
            row.total_days,
            row.booked_days,
        ])
    return buffer.getvalue()
