"""Booking lifecycle: creation under a car lock and status transitions."""
import asyncio
import logging
import secrets
import string
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import BookingStatus, NotificationType, NotificationPriority
from app.core.errors import BookingConflictError, InvalidTransitionError
from app.core.metrics import bookings_created, booking_conflicts, booking_transitions
from app.db.repositories import BookingRepository, CarRepository, LocationRepository
from app.models.booking import Booking
from app.schemas.booking import BookingCreate
from app.services.availability import DateRange, compute_price, find_conflicts
from app.services.customers import record_booking_for_customer
from app.services.notifications import notify

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits

ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    chars = string.digits + string.ascii_uppercase
    out = []
    while number:
        number, rem = divmod(number, 36)
        out.append(chars[rem])
    return "".join(reversed(out))


def generate_confirmation_code(now_ms: Optional[int] = None) -> str:
    """Four random characters plus the tail of the base-36 clock, as XXXX-XXXX."""
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    clock = to_base36(now_ms)[-4:].rjust(4, "0")
    code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(4)) + clock
    return f"{code[:4]}-{code[4:]}"


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return BookingStatus(target) in ALLOWED_TRANSITIONS[BookingStatus(current)]


class CarLocks:
    """In-process lock per car id, held for the whole check-and-write.

    SQLite ignores ``SELECT ... FOR UPDATE``, and an in-memory database shares
    one connection between sessions, so the row lock alone does not serialize
    bookings there. A lock is dropped once nobody holds or waits for it.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, car_id: str):
        lock = self._locks.setdefault(car_id, asyncio.Lock())
        self._users[car_id] = self._users.get(car_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[car_id] -= 1
            if not self._users[car_id]:
                del self._users[car_id]
                del self._locks[car_id]


car_locks = CarLocks()


async def create_booking(db: AsyncSession, payload: BookingCreate) -> Booking:
    """Check availability and insert the booking in one transaction.

    The car stays locked from the availability check until commit, so two
    concurrent requests for the same car are serialized: one is stored, the
    other gets ``BookingConflictError``.
    """
    candidate = DateRange(payload.start_date, payload.end_date).validate()

    async with car_locks.hold(payload.car_id):
        try:
            booking = await _insert_booking(db, payload, candidate)
        except Exception:
            await db.rollback()
            raise

    bookings_created.labels(location_id=booking.location_id).inc()
    logger.info(f"Booking {booking.id} created for car {booking.car_id}, total {booking.total_price}")
    return booking


async def _insert_booking(db: AsyncSession, payload: BookingCreate, candidate: DateRange) -> Booking:
    bookings = BookingRepository(db)

    car = await CarRepository(db).get_for_update(payload.car_id)
    if not car:
        raise HTTPException(status_code=404, detail=f"Car with id {payload.car_id} not found")
    if not car.available:
        raise HTTPException(status_code=409, detail=f"Car {car.id} is not available for booking")
    location = await LocationRepository(db).get(payload.location_id)
    if not location:
        raise HTTPException(status_code=404, detail=f"Location with id {payload.location_id} not found")

    conflicts = find_conflicts(candidate, await bookings.blocking_for_car(car.id))
    if conflicts:
        booking_conflicts.inc()
        logger.info(f"Booking rejected for car {car.id} {candidate.start}..{candidate.end}: overlaps {len(conflicts)}")
        raise BookingConflictError(car.id, [b.id for b in conflicts])

    total_price = compute_price(car, candidate)
    customer = await record_booking_for_customer(
        db, payload.name, payload.email, payload.phone, total_price
    )

    booking = Booking(
        id=f"booking-{secrets.token_hex(6)}",
        car_id=car.id,
        customer_id=customer.id,
        location_id=location.id,
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        start_date=candidate.start,
        end_date=candidate.end,
        status=BookingStatus.PENDING,
        total_price=total_price,
        confirmation_code=generate_confirmation_code(),
    )
    await bookings.add(booking)
    car.popularity = (car.popularity or 0) + 1

    await notify(
        db,
        NotificationType.NEW_BOOKING,
        "New Booking",
        f"{payload.name} has booked a {car.make} {car.model} for "
        f"{candidate.start:%b %d} - {candidate.end:%b %d}",
        priority=NotificationPriority.HIGH,
        related_id=booking.id,
        link_to=f"/admin?booking={booking.id}",
    )

    # load server defaults before commit; no transaction is reopened afterwards
    await db.flush()
    await db.refresh(booking)
    await db.commit()
    return booking


TRANSITION_NOTICES = {
    BookingStatus.CONFIRMED: ("Booking Approved", NotificationType.BOOKING_UPDATE),
    BookingStatus.COMPLETED: ("Booking Completed", NotificationType.BOOKING_UPDATE),
    BookingStatus.CANCELLED: ("Booking Cancelled", NotificationType.BOOKING_CANCELLED),
}


async def transition_booking(
    db: AsyncSession,
    booking: Booking,
    target: BookingStatus,
    reason: Optional[str] = None,
    rejected: bool = False,
) -> Booking:
    """Move a booking along its lifecycle and record a notification.

    ``rejected`` marks a cancellation of a still-pending request as an admin
    rejection: the reason lands in ``rejection_reason`` instead of
    ``cancellation_reason``.
    """
    current = BookingStatus(booking.status)
    if not can_transition(current, target):
        raise InvalidTransitionError(booking.id, current, target)
    if rejected and current != BookingStatus.PENDING:
        raise InvalidTransitionError(booking.id, current, "rejected")

    booking.status = target
    booking.updated_at = datetime.now(timezone.utc)
    if target == BookingStatus.CANCELLED:
        if rejected:
            booking.rejection_reason = reason
        else:
            booking.cancellation_reason = reason

    title, type_ = TRANSITION_NOTICES[target]
    if rejected:
        title = "Booking Rejected"
    verb = title.split()[-1].lower()
    await notify(
        db,
        type_,
        title,
        f"Booking #{booking.id} has been {verb}",
        priority=NotificationPriority.MEDIUM,
        related_id=booking.id,
        link_to=f"/admin?booking={booking.id}",
    )

    db.add(booking)
    await db.commit()
    await db.refresh(booking)

    booking_transitions.labels(from_status=str(current), to_status=str(target)).inc()
    logger.info(f"Booking {booking.id}: {current} -> {target}")
    return booking
