import pytest
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from app.core.errors import InvalidRangeError
from app.services.availability import DateRange
from app.services.pricing import apply_tax, calculate_quote


@dataclass
class FakeCar:
    id: str = "car-1"
    price_per_day: Decimal = Decimal("50.00")


class TestQuoteCalculation:
    """Quotes wrap the engine's base price with a tax line"""

    @pytest.mark.pricing
    @pytest.mark.parametrize("rate,days,subtotal,tax,total", [
        ("50.00", 1, "50.00", "5.00", "55.00"),
        ("50.00", 5, "250.00", "25.00", "275.00"),
        ("33.33", 3, "99.99", "10.00", "109.99"),
        ("0.00", 4, "0.00", "0.00", "0.00"),
    ])
    def test_quote_with_tax(self, rate, days, subtotal, tax, total):
        start = date(2024, 3, 1)
        span = DateRange(start, start + timedelta(days=days - 1))
        res = calculate_quote(FakeCar(price_per_day=Decimal(rate)), span)

        assert res.days == days
        assert res.final_price == Decimal(total)
        breakdown = res.price_breakdown
        assert breakdown["subtotal"] == Decimal(subtotal)
        assert breakdown["tax"] == Decimal(tax)
        assert breakdown["tax_rate"] == Decimal("0.10")
        assert breakdown["price_per_day"] == Decimal(rate)

    @pytest.mark.pricing
    def test_quote_without_tax(self):
        span = DateRange(date(2024, 3, 1), date(2024, 3, 5))
        res = calculate_quote(FakeCar(), span, include_tax=False)

        assert res.final_price == Decimal("250.00")
        assert res.price_breakdown["tax"] == Decimal("0.00")

    @pytest.mark.pricing
    def test_quote_echoes_the_range(self):
        span = DateRange(date(2024, 3, 1), date(2024, 3, 2))
        res = calculate_quote(FakeCar(id="car-9"), span)

        assert res.car_id == "car-9"
        assert res.start_date == date(2024, 3, 1)
        assert res.end_date == date(2024, 3, 2)

    @pytest.mark.pricing
    def test_quote_rejects_inverted_range(self):
        with pytest.raises(InvalidRangeError):
            calculate_quote(FakeCar(), DateRange(date(2024, 3, 5), date(2024, 3, 1)))


class TestTax:

    @pytest.mark.pricing
    def test_default_rate(self):
        assert apply_tax(Decimal("250.00")) == Decimal("25.00")

    @pytest.mark.pricing
    def test_custom_rate_rounds_half_up(self):
        assert apply_tax(Decimal("10.05"), Decimal("0.5")) == Decimal("5.03")


@pytest.mark.integration
async def test_quote_endpoint(test_client, car):
    response = await test_client.post("/quotes/calc", json={
        "car_id": car.id,
        "start_date": "2024-03-01",
        "end_date": "2024-03-05",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["days"] == 5
    assert Decimal(data["final_price"]) == Decimal("275.00")
    assert Decimal(data["price_breakdown"]["subtotal"]) == Decimal("250.00")


@pytest.mark.integration
async def test_quote_endpoint_inverted_range_is_422(test_client, car):
    response = await test_client.post("/quotes/calc", json={
        "car_id": car.id,
        "start_date": "2024-03-05",
        "end_date": "2024-03-01",
    })
    assert response.status_code == 422
    assert "cannot be before" in response.json()["detail"]


@pytest.mark.integration
async def test_quote_endpoint_unknown_car(test_client, setup_db):
    response = await test_client.post("/quotes/calc", json={
        "car_id": "missing",
        "start_date": "2024-03-01",
        "end_date": "2024-03-02",
    })
    assert response.status_code == 404
