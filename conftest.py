import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.session import get_db
from app.models.base import Base
from app.models.booking import Booking
from app.models.car import Car
from app.models.location import Location
from app.models.user import User
from app.core.security import create_access_token, hash_password
from app.core.config import settings
from app.core.enums import BookingStatus, FuelType, Transmission, UserRole


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

AsyncSessionTest = sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with AsyncSessionTest() as session:
        yield session


@pytest.fixture
async def setup_db():
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session(setup_db):
    async with AsyncSessionTest() as session:
        yield session


@pytest.fixture
async def test_client(setup_db):
    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def admin_user(db_session):
    user = User(username="admin@example.com", password_hash=hash_password("admin123"), role=UserRole.ADMIN)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def admin_token(admin_user):
    return create_access_token(admin_user.id, UserRole.ADMIN)


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
async def staff_headers(db_session):
    user = User(username="staff@example.com", password_hash=hash_password("staff123"), role=UserRole.STAFF)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return {"Authorization": f"Bearer {create_access_token(user.id, UserRole.STAFF)}"}


@pytest.fixture
def expired_token():
    from app.core.security import JWT_ALGORITHM
    from jose import jwt

    payload = {
        "sub": "user_1",
        "role": UserRole.ADMIN.value,
        "exp": datetime.now(timezone.utc) - timedelta(hours=1),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)


@pytest.fixture
def create_location_factory(db_session):
    async def _create_location(name="Downtown", **kwargs):
        data = {
            "name": name,
            "address": "100 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip_code": "62701",
            "phone": "555-0100",
        }
        data.update(kwargs)
        location = Location(**data)
        db_session.add(location)
        await db_session.commit()
        await db_session.refresh(location)
        return location

    return _create_location


@pytest.fixture
def create_car_factory(db_session):
    async def _create_car(location_id, make="Toyota", model="Camry", price_per_day="50.00", **kwargs):
        data = {
            "make": make,
            "model": model,
            "year": 2022,
            "transmission": Transmission.AUTOMATIC,
            "fuel_type": FuelType.GASOLINE,
            "seats": 5,
            "price_per_day": Decimal(price_per_day),
            "location_id": location_id,
        }
        data.update(kwargs)
        car = Car(**data)
        db_session.add(car)
        await db_session.commit()
        await db_session.refresh(car)
        return car

    return _create_car


@pytest.fixture
def create_booking_factory(db_session):
    async def _create_booking(car, start_date, end_date, status=BookingStatus.CONFIRMED, **kwargs):
        days = (end_date - start_date).days + 1
        data = {
            "car_id": car.id,
            "location_id": car.location_id,
            "name": "Jane Roe",
            "email": "jane@example.com",
            "phone": "555-0199",
            "start_date": start_date,
            "end_date": end_date,
            "status": status,
            "total_price": Decimal(str(car.price_per_day)) * days,
        }
        data.update(kwargs)
        booking = Booking(**data)
        db_session.add(booking)
        await db_session.commit()
        await db_session.refresh(booking)
        return booking

    return _create_booking


@pytest.fixture
async def location(create_location_factory):
    return await create_location_factory()


@pytest.fixture
async def car(create_car_factory, location):
    return await create_car_factory(location.id)


@pytest.fixture
def future_start():
    return date.today() + timedelta(days=30)


@pytest.fixture
def booking_payload(car, location, future_start):
    return {
        "car_id": car.id,
        "location_id": location.id,
        "name": "John Doe",
        "email": "John@Example.com",
        "phone": "555-1234",
        "start_date": future_start.isoformat(),
        "end_date": (future_start + timedelta(days=2)).isoformat(),
    }


MARKERS = {
    "integration": "tests that drive the API through the ASGI client",
    "unit": "tests of pure functions with no database",
    "availability": "availability engine behaviour",
    "pricing": "duration, price and quote calculations",
    "bookings": "booking creation and status lifecycle",
    "analytics": "fleet analytics and exports",
    "audit": "audit trail of admin actions",
    "idempotency": "Idempotency-Key replay",
    "rate_limit": "per-client booking rate limit",
}


def pytest_configure(config):
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


class FakeRedis:
    """Just enough of redis.asyncio.Redis for caching, idempotency and rate limits."""

    def __init__(self):
        self.store = {}

    async def get(self, key):
        value = self.store.get(key)
        return value.encode() if isinstance(value, str) else value

    async def set(self, key, value, ex=None):
        self.store[key] = value
        return True

    async def incr(self, key):
        self.store[key] = str(int(self.store.get(key, 0)) + 1)
        return int(self.store[key])

    async def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0


@pytest.fixture
def fake_redis(monkeypatch):
    client = FakeRedis()
    monkeypatch.setattr("app.core.redis.redis", client)
    return client
