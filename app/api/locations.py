from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found
from app.core.enums import AuditAction
from app.core.response_builders import build_location_response, build_response_list
from app.core.security import require_admin
from app.db.repositories import BookingRepository, CarRepository, LocationRepository
from app.db.session import get_db
from app.models.location import Location
from app.schemas.location import LocationCreate, LocationOut, LocationUpdate

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("", response_model=List[LocationOut])
async def list_locations(db: AsyncSession = Depends(get_db)):
    locations = await LocationRepository(db).list(limit=500)
    return build_response_list(build_location_response, sorted(locations, key=lambda l: l.name))


@router.get("/{location_id}", response_model=LocationOut)
async def get_location(location_id: str, db: AsyncSession = Depends(get_db)):
    location = await LocationRepository(db).get(location_id)
    check_not_found(location, "Location", location_id)
    return build_location_response(location)


@router.post("", response_model=LocationOut, status_code=201)
@audit_log(AuditAction.CREATE_LOCATION)
async def create_location(
    payload: LocationCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    location = await LocationRepository(db).add(Location(**payload.model_dump()))
    await db.commit()
    await db.refresh(location)
    return build_location_response(location)


@router.put("/{location_id}", response_model=LocationOut)
@audit_log(AuditAction.UPDATE_LOCATION)
async def update_location(
    location_id: str,
    payload: LocationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    repo = LocationRepository(db)
    location = await repo.get(location_id)
    check_not_found(location, "Location", location_id)

    values = payload.model_dump(exclude_unset=True)
    for required in ("name", "address", "city"):
        if required in values and values[required] is None:
            raise HTTPException(status_code=422, detail=f"{required} cannot be null")

    await repo.update(location, values)
    await db.commit()
    await db.refresh(location)
    return build_location_response(location)


@router.delete("/{location_id}")
@audit_log(AuditAction.DELETE_LOCATION)
async def delete_location(
    location_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    repo = LocationRepository(db)
    location = await repo.get(location_id)
    check_not_found(location, "Location", location_id)

    # cars and bookings keep a non-null reference to their location
    if await CarRepository(db).search(location_id=location_id):
        raise HTTPException(status_code=409, detail=f"Location {location_id} still has cars")
    if await BookingRepository(db).filter(location_id=location_id, limit=1):
        raise HTTPException(status_code=409, detail=f"Location {location_id} still has bookings")

    await repo.delete(location)
    await db.commit()
    return {"deleted": True}
