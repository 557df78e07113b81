"""Caching, idempotency and rate limiting against an in-memory Redis double"""
import pytest
from datetime import timedelta
from decimal import Decimal

from app.core.config import settings
from app.utils.idempotency import get_idempotent, set_idempotent

pytestmark = pytest.mark.integration


@pytest.mark.idempotency
async def test_idempotency_helpers(fake_redis):
    key = "pytest-idemp"
    assert await get_idempotent(key) is None
    await set_idempotent(key, {"ok": True})
    assert await get_idempotent(key) == {"ok": True}


@pytest.mark.idempotency
async def test_idempotency_without_redis():
    await set_idempotent("no-redis", {"ok": True})
    assert await get_idempotent("no-redis") is None


@pytest.mark.idempotency
async def test_repeated_booking_request_replays_the_first(test_client, fake_redis, booking_payload, admin_headers):
    headers = {"Idempotency-Key": "booking-abc"}
    first = await test_client.post("/bookings", json=booking_payload, headers=headers)
    second = await test_client.post("/bookings", json=booking_payload, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.json()["id"] == first.json()["id"]

    response = await test_client.get("/bookings", headers=admin_headers)
    assert len(response.json()) == 1


@pytest.mark.rate_limit
async def test_booking_rate_limit(test_client, fake_redis, booking_payload, future_start, monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT", 2)

    for offset in range(2):
        booking_payload["start_date"] = (future_start + timedelta(days=offset * 10)).isoformat()
        booking_payload["end_date"] = (future_start + timedelta(days=offset * 10)).isoformat()
        response = await test_client.post("/bookings", json=booking_payload)
        assert response.status_code == 201

    booking_payload["start_date"] = (future_start + timedelta(days=40)).isoformat()
    booking_payload["end_date"] = booking_payload["start_date"]
    response = await test_client.post("/bookings", json=booking_payload)
    assert response.status_code == 429

    # limits are per client
    response = await test_client.post(
        "/bookings", json=booking_payload, headers={"X-Forwarded-For": "10.0.0.9"}
    )
    assert response.status_code == 201


@pytest.mark.pricing
async def test_quote_is_cached(test_client, fake_redis, car):
    body = {"car_id": car.id, "start_date": "2030-01-01", "end_date": "2030-01-02"}
    first = await test_client.post("/quotes/calc", json=body)
    assert first.status_code == 200
    assert any(key.startswith("price:") for key in fake_redis.store)

    second = await test_client.post("/quotes/calc", json=body)
    assert second.json() == first.json()


@pytest.mark.pricing
async def test_quote_cache_key_tracks_the_daily_rate(test_client, fake_redis, car, db_session):
    body = {"car_id": car.id, "start_date": "2030-01-01", "end_date": "2030-01-02"}
    await test_client.post("/quotes/calc", json=body)

    car.price_per_day = 80
    db_session.add(car)
    await db_session.commit()

    response = await test_client.post("/quotes/calc", json=body)
    assert Decimal(response.json()["price_breakdown"]["subtotal"]) == Decimal("160.00")
