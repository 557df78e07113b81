import pytest
from datetime import date, timedelta
from decimal import Decimal

from app.core.enums import BookingStatus, CarType, FuelType, Transmission

pytestmark = pytest.mark.integration


@pytest.fixture
async def fleet(create_car_factory, create_location_factory, location):
    airport = await create_location_factory("Airport")
    return {
        "camry": await create_car_factory(location.id, car_type=CarType.SEDAN),
        "model3": await create_car_factory(
            location.id, make="Tesla", model="Model 3", price_per_day="90.00",
            fuel_type=FuelType.ELECTRIC, car_type=CarType.SEDAN, year=2023,
        ),
        "rav4": await create_car_factory(
            airport.id, make="Toyota", model="RAV4", price_per_day="70.00",
            transmission=Transmission.MANUAL, seats=7, car_type=CarType.SUV, year=2020,
        ),
    }


async def test_list_and_filter_cars(test_client, fleet, location):
    response = await test_client.get("/cars")
    assert response.status_code == 200
    assert len(response.json()) == 3

    response = await test_client.get("/cars", params={"search": "tesla"})
    assert [c["model"] for c in response.json()] == ["Model 3"]

    response = await test_client.get("/cars", params={"location_id": location.id})
    assert len(response.json()) == 2

    response = await test_client.get("/cars", params={"transmission": "manual"})
    assert [c["model"] for c in response.json()] == ["RAV4"]

    response = await test_client.get("/cars", params={"min_price": "60", "max_price": "80"})
    assert [c["model"] for c in response.json()] == ["RAV4"]

    response = await test_client.get("/cars", params={"min_seats": 6})
    assert [c["model"] for c in response.json()] == ["RAV4"]

    response = await test_client.get("/cars", params={"car_type": "sedan", "fuel_type": "electric"})
    assert [c["model"] for c in response.json()] == ["Model 3"]


async def test_sort_cars(test_client, fleet):
    response = await test_client.get("/cars", params={"sort": "price", "order": "desc"})
    assert [c["model"] for c in response.json()] == ["Model 3", "RAV4", "Camry"]

    response = await test_client.get("/cars", params={"sort": "year"})
    assert [c["year"] for c in response.json()] == [2020, 2022, 2023]

    response = await test_client.get("/cars", params={"sort": "bogus"})
    assert response.status_code == 422


async def test_sort_by_availability(test_client, fleet, create_booking_factory):
    today = date.today()
    await create_booking_factory(fleet["camry"], today, today + timedelta(days=5))
    await create_booking_factory(fleet["rav4"], today, today + timedelta(days=1))

    response = await test_client.get("/cars", params={"sort": "availability"})
    assert [c["model"] for c in response.json()] == ["Model 3", "RAV4", "Camry"]


async def test_date_filter_hides_booked_cars(test_client, fleet, create_booking_factory):
    start = date(2030, 6, 1)
    await create_booking_factory(fleet["camry"], start, start + timedelta(days=4))
    await create_booking_factory(
        fleet["rav4"], start, start + timedelta(days=4), status=BookingStatus.CANCELLED
    )

    response = await test_client.get("/cars", params={
        "start_date": "2030-06-05", "end_date": "2030-06-07",
    })
    assert sorted(c["model"] for c in response.json()) == ["Model 3", "RAV4"]

    response = await test_client.get("/cars", params={
        "start_date": "2030-06-06", "end_date": "2030-06-07",
    })
    assert len(response.json()) == 3

    response = await test_client.get("/cars", params={"start_date": "2030-06-06"})
    assert response.status_code == 422

    response = await test_client.get("/cars", params={
        "start_date": "2030-06-07", "end_date": "2030-06-06",
    })
    assert response.status_code == 422


async def test_car_availability(test_client, car, create_booking_factory):
    booked = await create_booking_factory(car, date(2030, 1, 1), date(2030, 1, 5))

    response = await test_client.get(f"/cars/{car.id}/availability", params={
        "start_date": "2030-01-05", "end_date": "2030-01-08",
    })
    data = response.json()
    assert data["available"] is False
    assert data["conflicts"] == [booked.id]
    assert data["days"] == 4
    assert Decimal(data["total_price"]) == Decimal("200.00")

    response = await test_client.get(f"/cars/{car.id}/availability", params={
        "start_date": "2030-01-06", "end_date": "2030-01-08",
    })
    assert response.json()["available"] is True

    response = await test_client.get(f"/cars/{car.id}/availability", params={
        "start_date": "2030-01-08", "end_date": "2030-01-06",
    })
    assert response.status_code == 422

    response = await test_client.get(f"/cars/{car.id}/availability", params={
        "start_date": "soon", "end_date": "2030-01-06",
    })
    assert response.status_code == 422


async def test_blocked_dates(test_client, car, create_booking_factory):
    await create_booking_factory(car, date(2030, 1, 1), date(2030, 1, 2))
    await create_booking_factory(car, date(2030, 1, 2), date(2030, 1, 3), status=BookingStatus.PENDING)
    await create_booking_factory(car, date(2030, 1, 10), date(2030, 1, 11), status=BookingStatus.CANCELLED)

    response = await test_client.get(f"/cars/{car.id}/blocked-dates")
    assert response.status_code == 200
    assert response.json()["dates"] == ["2030-01-01", "2030-01-02", "2030-01-03"]


async def test_unknown_car(test_client, setup_db):
    assert (await test_client.get("/cars/missing")).status_code == 404
    assert (await test_client.get("/cars/missing/blocked-dates")).status_code == 404


async def test_admin_car_crud(test_client, location, admin_headers):
    payload = {
        "make": "Honda",
        "model": "Civic",
        "year": 2021,
        "transmission": "cvt",
        "fuel_type": "hybrid",
        "seats": 5,
        "price_per_day": "45.50",
        "location_id": location.id,
        "car_type": "hatchback",
    }
    response = await test_client.post("/cars", json=payload)
    assert response.status_code == 401

    response = await test_client.post("/cars", json=payload, headers=admin_headers)
    assert response.status_code == 201
    car_id = response.json()["id"]

    response = await test_client.get("/notifications", headers=admin_headers)
    assert response.json()[0]["title"] == "New Car Added"

    response = await test_client.put(f"/cars/{car_id}", json={"price_per_day": "55.00"}, headers=admin_headers)
    assert response.status_code == 200
    assert Decimal(response.json()["price_per_day"]) == Decimal("55.00")
    assert response.json()["model"] == "Civic"

    response = await test_client.delete(f"/cars/{car_id}", headers=admin_headers)
    assert response.json() == {"deleted": True}
    assert (await test_client.get(f"/cars/{car_id}")).status_code == 404


async def test_create_car_validation(test_client, location, admin_headers):
    payload = {
        "make": "Honda",
        "model": "Civic",
        "year": 2021,
        "transmission": "cvt",
        "fuel_type": "hybrid",
        "seats": 12,
        "price_per_day": "45.50",
        "location_id": location.id,
    }
    response = await test_client.post("/cars", json=payload, headers=admin_headers)
    assert response.status_code == 422

    payload["seats"] = 4
    payload["location_id"] = "nowhere"
    response = await test_client.post("/cars", json=payload, headers=admin_headers)
    assert response.status_code == 404


async def test_delete_car_with_active_booking(test_client, car, create_booking_factory, admin_headers):
    booking = await create_booking_factory(car, date(2030, 1, 1), date(2030, 1, 2))

    response = await test_client.delete(f"/cars/{car.id}", headers=admin_headers)
    assert response.status_code == 409

    response = await test_client.get(f"/cars/{car.id}/bookings", headers=admin_headers)
    assert [b["id"] for b in response.json()] == [booking.id]


async def test_delete_car_keeps_booking_history(test_client, car, create_booking_factory, admin_headers):
    booking = await create_booking_factory(
        car, date(2020, 1, 1), date(2020, 1, 2), status=BookingStatus.COMPLETED
    )

    response = await test_client.delete(f"/cars/{car.id}", headers=admin_headers)
    assert response.status_code == 200

    response = await test_client.get(f"/bookings/{booking.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["car_id"] is None
