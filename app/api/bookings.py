from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found, client_key
from app.core.enums import AuditAction, BookingStatus
from app.core.rate_limit import check_rate_limit
from app.core.response_builders import build_booking_response, build_response_list
from app.core.security import require_admin
from app.db.repositories import BookingRepository
from app.db.session import get_db
from app.schemas.booking import BookingCreate, BookingOut, BookingReason
from app.services.bookings import create_booking, transition_booking
from app.services.webhook import booking_event, send_webhook
from app.utils.idempotency import get_idempotent, set_idempotent

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingOut, status_code=201)
async def book_car(
    payload: BookingCreate,
    request: Request,
    idempotency_key: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(client_key(request))

    if idempotency_key:
        prev = await get_idempotent(idempotency_key)
        if prev:
            return prev

    booking = await create_booking(db, payload)

    out = build_booking_response(booking)
    if idempotency_key:
        await set_idempotent(idempotency_key, out.model_dump(mode="json"))
    return out


@router.get("/confirmation/{code}", response_model=BookingOut)
async def booking_by_confirmation(code: str, db: AsyncSession = Depends(get_db)):
    booking = await BookingRepository(db).by_confirmation_code(code)
    check_not_found(booking, "Booking")
    return build_booking_response(booking)


@router.get("", response_model=List[BookingOut])
async def list_bookings(
    status: Optional[BookingStatus] = Query(None),
    car_id: Optional[str] = Query(None),
    location_id: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    bookings = await BookingRepository(db).filter(
        status=status,
        car_id=car_id,
        location_id=location_id,
        email=email,
        limit=limit,
        offset=offset,
    )
    return build_response_list(build_booking_response, bookings)


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(
    booking_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    booking = await BookingRepository(db).get(booking_id)
    check_not_found(booking, "Booking", booking_id)
    return build_booking_response(booking)


async def _transition(db, booking_id: str, target: BookingStatus, reason=None, rejected=False) -> BookingOut:
    booking = await BookingRepository(db).get(booking_id)
    check_not_found(booking, "Booking", booking_id)

    booking = await transition_booking(db, booking, target, reason=reason, rejected=rejected)

    if target in (BookingStatus.CONFIRMED, BookingStatus.CANCELLED):
        event = "booking_rejected" if rejected else f"booking_{target.value}"
        await send_webhook(booking_event(event, booking))
    return build_booking_response(booking)


@router.post("/{booking_id}/approve", response_model=BookingOut)
@audit_log(AuditAction.APPROVE_BOOKING)
async def approve_booking(
    booking_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    return await _transition(db, booking_id, BookingStatus.CONFIRMED)


@router.post("/{booking_id}/reject", response_model=BookingOut)
@audit_log(AuditAction.REJECT_BOOKING)
async def reject_booking(
    booking_id: str,
    payload: BookingReason,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    return await _transition(db, booking_id, BookingStatus.CANCELLED, reason=payload.reason, rejected=True)


@router.post("/{booking_id}/cancel", response_model=BookingOut)
@audit_log(AuditAction.CANCEL_BOOKING)
async def cancel_booking(
    booking_id: str,
    payload: BookingReason,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    return await _transition(db, booking_id, BookingStatus.CANCELLED, reason=payload.reason)


@router.post("/{booking_id}/complete", response_model=BookingOut)
@audit_log(AuditAction.COMPLETE_BOOKING)
async def complete_booking(
    booking_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    return await _transition(db, booking_id, BookingStatus.COMPLETED)
