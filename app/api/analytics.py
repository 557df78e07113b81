"""Admin dashboard analytics over a date window (today .. today+14 by default)."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth_utils import window_or_default
from app.core.security import require_admin
from app.db.repositories import BookingRepository, CarRepository, LocationRepository
from app.db.session import get_db
from app.schemas.analytics import (
    CarAvailabilityRow,
    CarTypePoint,
    DailyPoint,
    FleetStatsOut,
    UtilizationPoint,
)
from app.services import analytics
from app.services.availability import DateRange

router = APIRouter(prefix="/analytics", tags=["analytics"])


async def _fleet(db: AsyncSession, window: DateRange, location_id: Optional[str] = None):
    cars = await CarRepository(db).search(location_id=location_id)
    bookings = await BookingRepository(db).touching(window.start, window.end, [c.id for c in cars])
    return cars, bookings


@router.get("/fleet-availability", response_model=List[CarAvailabilityRow])
async def fleet_availability(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    location_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    window = window_or_default(start_date, end_date)
    cars, bookings = await _fleet(db, window, location_id)
    return analytics.fleet_availability(cars, bookings, window)


@router.get("/fleet-availability.csv")
async def fleet_availability_csv(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    location_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    window = window_or_default(start_date, end_date)
    cars, bookings = await _fleet(db, window, location_id)
    rows = analytics.fleet_availability(cars, bookings, window)
    names = {loc.id: loc.name for loc in await LocationRepository(db).list(limit=500)}
    return Response(
        content=analytics.fleet_availability_csv(cars, rows, names),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="fleet-availability-{window.start}.csv"'
        },
    )


@router.get("/stats", response_model=FleetStatsOut)
async def stats(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    window = window_or_default(start_date, end_date)
    previous = analytics.previous_period(window)
    cars = await CarRepository(db).all()
    bookings = await BookingRepository(db).touching(previous.start, window.end)
    return analytics.fleet_stats(cars, bookings, window)


@router.get("/daily", response_model=List[DailyPoint])
async def daily(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    window = window_or_default(start_date, end_date)
    cars, bookings = await _fleet(db, window)
    return analytics.daily_series(cars, bookings, window)


@router.get("/utilization", response_model=List[UtilizationPoint])
async def utilization(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    window = window_or_default(start_date, end_date)
    cars, bookings = await _fleet(db, window)
    return analytics.utilization_series(cars, bookings, window)


@router.get("/car-types", response_model=List[CarTypePoint])
async def car_types(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    window = window_or_default(start_date, end_date)
    cars, bookings = await _fleet(db, window)
    return analytics.car_type_breakdown(cars, bookings, window)
