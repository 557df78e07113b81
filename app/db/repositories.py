"""Data access for the service.

Routers and services read and write through these repositories; the
availability engine only ever sees what they return.
"""
from datetime import date, datetime
from typing import Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import String, cast, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.enums import BookingStatus, EmailStatus
from app.core.metrics import track_db_operation
from app.models.registry import (
    Booking,
    Car,
    Customer,
    Document,
    Location,
    Notification,
    ScheduledEmail,
)
from app.services.availability import BLOCKING_STATUSES

ModelT = TypeVar("ModelT")


class Repository(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, item_id: str) -> Optional[ModelT]:
        return await self.db.get(self.model, item_id)

    async def list(self, limit: int = 100, offset: int = 0) -> List[ModelT]:
        q = select(self.model).order_by(self.model.created_at.desc()).limit(limit).offset(offset)
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def add(self, item: ModelT) -> ModelT:
        self.db.add(item)
        await self.db.flush()
        return item

    async def update(self, item: ModelT, values: dict) -> ModelT:
        for field, value in values.items():
            setattr(item, field, value)
        self.db.add(item)
        await self.db.flush()
        return item

    async def delete(self, item: ModelT) -> None:
        await self.db.delete(item)
        await self.db.flush()


class LocationRepository(Repository[Location]):
    model = Location


class CarRepository(Repository[Car]):
    model = Car

    async def get_for_update(self, car_id: str) -> Optional[Car]:
        """Fetch a car and lock its row for the rest of the transaction."""
        res = await self.db.execute(select(Car).where(Car.id == car_id).with_for_update())
        return res.scalars().first()

    @track_db_operation("search", "cars")
    async def search(
        self,
        search: Optional[str] = None,
        location_id: Optional[str] = None,
        transmission=None,
        fuel_type=None,
        car_type=None,
        min_price=None,
        max_price=None,
        min_seats: Optional[int] = None,
        max_seats: Optional[int] = None,
    ) -> List[Car]:
        q = select(Car)
        if search:
            pattern = f"%{search.lower()}%"
            q = q.where(or_(
                func.lower(Car.make).like(pattern),
                func.lower(Car.model).like(pattern),
                cast(Car.year, String).like(f"%{search}%"),
            ))
        if location_id:
            q = q.where(Car.location_id == location_id)
        if transmission:
            q = q.where(Car.transmission == transmission)
        if fuel_type:
            q = q.where(Car.fuel_type == fuel_type)
        if car_type:
            q = q.where(Car.car_type == car_type)
        if min_price is not None:
            q = q.where(Car.price_per_day >= min_price)
        if max_price is not None:
            q = q.where(Car.price_per_day <= max_price)
        if min_seats is not None:
            q = q.where(Car.seats >= min_seats)
        if max_seats is not None:
            q = q.where(Car.seats <= max_seats)
        res = await self.db.execute(q.order_by(Car.created_at))
        return list(res.scalars().all())

    async def all(self) -> List[Car]:
        res = await self.db.execute(select(Car).order_by(Car.created_at))
        return list(res.scalars().all())


class BookingRepository(Repository[Booking]):
    model = Booking

    async def filter(
        self,
        status: Optional[BookingStatus] = None,
        car_id: Optional[str] = None,
        location_id: Optional[str] = None,
        email: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Booking]:
        q = select(Booking)
        if status:
            q = q.where(Booking.status == status)
        if car_id:
            q = q.where(Booking.car_id == car_id)
        if location_id:
            q = q.where(Booking.location_id == location_id)
        if email:
            q = q.where(func.lower(Booking.email) == email.lower())
        q = q.order_by(Booking.created_at.desc()).limit(limit).offset(offset)
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def for_car(self, car_id: str) -> List[Booking]:
        res = await self.db.execute(
            select(Booking).where(Booking.car_id == car_id).order_by(Booking.start_date)
        )
        return list(res.scalars().all())

    @track_db_operation("blocking", "bookings")
    async def blocking_for_car(self, car_id: str) -> List[Booking]:
        res = await self.db.execute(
            select(Booking)
            .where(Booking.car_id == car_id, Booking.status.in_(list(BLOCKING_STATUSES)))
            .order_by(Booking.start_date)
        )
        return list(res.scalars().all())

    async def for_customer(self, customer_id: str) -> List[Booking]:
        res = await self.db.execute(
            select(Booking).where(Booking.customer_id == customer_id).order_by(Booking.start_date)
        )
        return list(res.scalars().all())

    @track_db_operation("touching", "bookings")
    async def touching(self, start: date, end: date, car_ids: Optional[Sequence[str]] = None) -> List[Booking]:
        """Bookings of any status whose span intersects [start, end]."""
        q = select(Booking).where(Booking.start_date <= end, Booking.end_date >= start)
        if car_ids is not None:
            q = q.where(Booking.car_id.in_(list(car_ids)))
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def starting_between(self, start: date, end: date) -> List[Booking]:
        res = await self.db.execute(
            select(Booking).where(Booking.start_date >= start, Booking.start_date <= end)
        )
        return list(res.scalars().all())

    async def by_confirmation_code(self, code: str) -> Optional[Booking]:
        res = await self.db.execute(
            select(Booking).where(Booking.confirmation_code == code.upper())
        )
        return res.scalars().first()


class CustomerRepository(Repository[Customer]):
    model = Customer

    async def by_email(self, email: str) -> Optional[Customer]:
        res = await self.db.execute(
            select(Customer).where(func.lower(Customer.email) == email.lower())
        )
        return res.scalars().first()

    async def search(
        self,
        query: Optional[str] = None,
        status=None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Customer]:
        q = select(Customer)
        if query:
            pattern = f"%{query.lower()}%"
            q = q.where(or_(func.lower(Customer.name).like(pattern), func.lower(Customer.email).like(pattern)))
        if status:
            q = q.where(Customer.status == status)
        q = q.order_by(Customer.created_at.desc()).limit(limit).offset(offset)
        res = await self.db.execute(q)
        return list(res.scalars().all())


class NotificationRepository(Repository[Notification]):
    model = Notification

    async def filter(self, unread_only: bool = False, priority=None, limit: int = 50) -> List[Notification]:
        q = select(Notification)
        if unread_only:
            q = q.where(Notification.read.is_(False))
        if priority:
            q = q.where(Notification.priority == priority)
        q = q.order_by(Notification.created_at.desc()).limit(limit)
        res = await self.db.execute(q)
        return list(res.scalars().all())

    async def unread_count(self) -> int:
        res = await self.db.execute(
            select(func.count(Notification.id)).where(Notification.read.is_(False))
        )
        return int(res.scalar_one())

    async def mark_all_read(self) -> int:
        items = await self.filter(unread_only=True, limit=10_000)
        for item in items:
            item.read = True
        await self.db.flush()
        return len(items)

    async def clear(self) -> int:
        res = await self.db.execute(select(Notification))
        items = res.scalars().all()
        for item in items:
            await self.db.delete(item)
        await self.db.flush()
        return len(items)


class DocumentRepository(Repository[Document]):
    model = Document

    async def for_booking(self, booking_id: str) -> List[Document]:
        res = await self.db.execute(
            select(Document).where(Document.booking_id == booking_id).order_by(Document.created_at)
        )
        return list(res.scalars().all())


class ScheduledEmailRepository(Repository[ScheduledEmail]):
    model = ScheduledEmail

    async def for_booking(self, booking_id: str) -> List[ScheduledEmail]:
        res = await self.db.execute(
            select(ScheduledEmail)
            .where(ScheduledEmail.booking_id == booking_id)
            .order_by(ScheduledEmail.scheduled_for)
        )
        return list(res.scalars().all())

    @track_db_operation("due", "scheduled_emails")
    async def due(self, now: datetime) -> List[ScheduledEmail]:
        res = await self.db.execute(
            select(ScheduledEmail)
            .where(ScheduledEmail.status == EmailStatus.SCHEDULED, ScheduledEmail.scheduled_for <= now)
            .order_by(ScheduledEmail.scheduled_for)
        )
        return list(res.scalars().all())
