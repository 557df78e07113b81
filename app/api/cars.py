from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found, parse_date_range
from app.core.config import settings
from app.core.enums import AuditAction, CarType, FuelType, NotificationType, Transmission
from app.core.errors import CarInUseError
from app.core.response_builders import build_booking_response, build_car_response, build_response_list
from app.core.security import require_admin
from app.db.repositories import BookingRepository, CarRepository, LocationRepository
from app.db.session import get_db
from app.models.car import Car
from app.schemas.booking import BookingOut
from app.schemas.car import BlockedDatesOut, CarAvailabilityOut, CarCreate, CarOut, CarUpdate
from app.services.availability import (
    DateRange,
    available_cars,
    booked_days_in_window,
    compute_duration,
    compute_price,
    find_conflicts,
    list_blocked_dates,
)
from app.services.notifications import notify

router = APIRouter(prefix="/cars", tags=["cars"])


def _upcoming_window() -> DateRange:
    today = date.today()
    return DateRange(today, today + timedelta(days=settings.AVAILABILITY_WINDOW_DAYS))


def _sort_cars(cars: List[Car], bookings: list, sort: Optional[str], order: str) -> List[Car]:
    if not sort:
        return cars
    reverse = order == "desc"
    if sort == "availability":
        # fewest blocked days over the upcoming window first
        window = _upcoming_window()
        booked = {
            car.id: len(booked_days_in_window([b for b in bookings if b.car_id == car.id], window))
            for car in cars
        }
        return sorted(cars, key=lambda c: booked[c.id], reverse=reverse)
    keys = {
        "price": lambda c: Decimal(str(c.price_per_day)),
        "year": lambda c: c.year,
        "seats": lambda c: c.seats,
    }
    return sorted(cars, key=keys[sort], reverse=reverse)


@router.get("", response_model=List[CarOut])
async def list_cars(
    search: Optional[str] = Query(None),
    location_id: Optional[str] = Query(None),
    transmission: Optional[Transmission] = Query(None),
    fuel_type: Optional[FuelType] = Query(None),
    car_type: Optional[CarType] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    min_seats: Optional[int] = Query(None, ge=1),
    max_seats: Optional[int] = Query(None, ge=1),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    sort: Optional[str] = Query(None, pattern="^(price|year|seats|availability)$"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Search the fleet.

    With ``start_date`` and ``end_date`` only cars free for the whole range
    are returned.
    """
    cars = await CarRepository(db).search(
        search=search,
        location_id=location_id,
        transmission=transmission,
        fuel_type=fuel_type,
        car_type=car_type,
        min_price=min_price,
        max_price=max_price,
        min_seats=min_seats,
        max_seats=max_seats,
    )

    bookings = []
    if start_date or end_date:
        candidate = parse_date_range(start_date, end_date)
        bookings = await BookingRepository(db).touching(candidate.start, candidate.end, [c.id for c in cars])
        cars = [c for c in available_cars(cars, bookings, candidate) if c.available]
    if sort == "availability":
        window = _upcoming_window()
        bookings = await BookingRepository(db).touching(window.start, window.end, [c.id for c in cars])

    cars = _sort_cars(cars, bookings, sort, order)
    return build_response_list(build_car_response, cars[offset:offset + limit])


@router.get("/{car_id}", response_model=CarOut)
async def get_car(car_id: str, db: AsyncSession = Depends(get_db)):
    car = await CarRepository(db).get(car_id)
    check_not_found(car, "Car", car_id)
    return build_car_response(car)


@router.get("/{car_id}/availability", response_model=CarAvailabilityOut)
async def car_availability(
    car_id: str,
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    car = await CarRepository(db).get(car_id)
    check_not_found(car, "Car", car_id)
    candidate = parse_date_range(start_date, end_date)

    conflicts = find_conflicts(candidate, await BookingRepository(db).for_car(car.id))
    return CarAvailabilityOut(
        car_id=car.id,
        start_date=candidate.start,
        end_date=candidate.end,
        available=bool(car.available) and not conflicts,
        days=compute_duration(candidate),
        total_price=compute_price(car, candidate),
        conflicts=[b.id for b in conflicts],
    )


@router.get("/{car_id}/blocked-dates", response_model=BlockedDatesOut)
async def blocked_dates(car_id: str, db: AsyncSession = Depends(get_db)):
    car = await CarRepository(db).get(car_id)
    check_not_found(car, "Car", car_id)
    bookings = await BookingRepository(db).for_car(car.id)
    return BlockedDatesOut(car_id=car.id, dates=sorted(list_blocked_dates(bookings)))


@router.get("/{car_id}/bookings", response_model=List[BookingOut])
async def car_bookings(
    car_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    car = await CarRepository(db).get(car_id)
    check_not_found(car, "Car", car_id)
    return build_response_list(build_booking_response, await BookingRepository(db).for_car(car.id))


@router.post("", response_model=CarOut, status_code=201)
@audit_log(AuditAction.CREATE_CAR)
async def create_car(
    payload: CarCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    location = await LocationRepository(db).get(payload.location_id)
    check_not_found(location, "Location", payload.location_id)

    car = await CarRepository(db).add(Car(**payload.model_dump()))
    await notify(
        db,
        NotificationType.SYSTEM,
        "New Car Added",
        f"{car.make} {car.model} ({car.year}) has been added to the fleet",
        related_id=car.id,
        link_to=f"/admin?car={car.id}",
    )
    await db.commit()
    await db.refresh(car)
    return build_car_response(car)


@router.put("/{car_id}", response_model=CarOut)
@audit_log(AuditAction.UPDATE_CAR)
async def update_car(
    car_id: str,
    payload: CarUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    cars = CarRepository(db)
    car = await cars.get(car_id)
    check_not_found(car, "Car", car_id)

    values = payload.model_dump(exclude_unset=True)
    if values.get("location_id"):
        location = await LocationRepository(db).get(values["location_id"])
        check_not_found(location, "Location", values["location_id"])
    for required in ("make", "model", "year", "transmission", "fuel_type", "seats", "price_per_day", "location_id"):
        if required in values and values[required] is None:
            raise HTTPException(status_code=422, detail=f"{required} cannot be null")

    await cars.update(car, values)
    await db.commit()
    await db.refresh(car)
    return build_car_response(car)


@router.delete("/{car_id}")
@audit_log(AuditAction.DELETE_CAR)
async def delete_car(
    car_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    cars = CarRepository(db)
    car = await cars.get(car_id)
    check_not_found(car, "Car", car_id)
    if await BookingRepository(db).blocking_for_car(car.id):
        raise CarInUseError(car.id)

    await cars.delete(car)
    await db.commit()
    return {"deleted": True}
