import pytest
from datetime import date, datetime, timezone
from types import SimpleNamespace

from app.core.enums import BookingStatus, DocumentType, EmailType
from app.services.documents import render_document
from app.services.email_scheduler import send_time

pytestmark = pytest.mark.integration


@pytest.fixture
async def booking(car, create_booking_factory):
    return await create_booking_factory(
        car, date(2030, 3, 10), date(2030, 3, 14), confirmation_code="ABCD-1234"
    )


class TestRendering:

    @pytest.mark.unit
    def test_receipt_has_tax_line(self):
        booking = SimpleNamespace(
            id="booking-1", confirmation_code="ABCD-1234", name="Jane <Roe>", email="jane@example.com",
            phone="555", start_date=date(2030, 3, 10), end_date=date(2030, 3, 14), total_price=250,
        )
        car = SimpleNamespace(make="Toyota", model="Camry", year=2022, color=None, license_plate="XYZ",
                              price_per_day=50)
        location = SimpleNamespace(name="Downtown", address="1 Main", city="Springfield", state="IL",
                                   zip_code="62701", phone=None)
        html = render_document(DocumentType.RECEIPT, booking, car, location,
                               now=datetime(2030, 3, 15, tzinfo=timezone.utc))

        assert "<title>Receipt</title>" in html
        assert "5 days x $50.00" in html
        assert "$250.00" in html
        assert "$25.00" in html
        assert "$275.00" in html
        assert "Jane &lt;Roe&gt;" in html
        assert "R-300315000000" in html

    @pytest.mark.unit
    @pytest.mark.parametrize("email_type,expected", [
        (EmailType.REMINDER, date(2030, 3, 8)),
        (EmailType.FOLLOWUP, date(2030, 3, 16)),
        (EmailType.REVIEW_REQUEST, date(2030, 3, 16)),
    ])
    def test_send_time(self, email_type, expected):
        booking = SimpleNamespace(start_date=date(2030, 3, 10), end_date=date(2030, 3, 14))
        when = send_time(booking, email_type, 2)
        assert when.date() == expected
        assert when.hour == 9


async def test_document_lifecycle(test_client, booking, admin_headers):
    response = await test_client.post(
        "/documents", json={"booking_id": booking.id, "type": "rental-agreement"}, headers=admin_headers
    )
    assert response.status_code == 201
    doc = response.json()
    assert doc["title"] == "Rental Agreement"
    assert doc["filename"] == f"rental-agreement-{booking.id}.pdf"
    assert doc["url"] == f"/documents/{doc['id']}"

    response = await test_client.get(doc["url"], headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Terms and Conditions" in response.text
    assert "ABCD-1234" in response.text

    response = await test_client.get("/documents", params={"booking_id": booking.id}, headers=admin_headers)
    assert [d["id"] for d in response.json()] == [doc["id"]]

    response = await test_client.delete(doc["url"], headers=admin_headers)
    assert response.json() == {"deleted": True}
    assert (await test_client.get(doc["url"], headers=admin_headers)).status_code == 404


async def test_document_for_unknown_booking(test_client, setup_db, admin_headers):
    response = await test_client.post(
        "/documents", json={"booking_id": "nope", "type": "invoice"}, headers=admin_headers
    )
    assert response.status_code == 404


async def test_invalid_document_type(test_client, booking, admin_headers):
    response = await test_client.post(
        "/documents", json={"booking_id": booking.id, "type": "poster"}, headers=admin_headers
    )
    assert response.status_code == 422


async def test_schedule_and_process_emails(test_client, booking, admin_headers):
    response = await test_client.post(
        "/emails", json={"booking_id": booking.id, "type": "reminder", "days": 3}, headers=admin_headers
    )
    assert response.status_code == 201
    reminder = response.json()
    assert reminder["status"] == "scheduled"
    assert reminder["recipient"] == "jane@example.com"
    assert reminder["scheduled_for"].startswith("2030-03-07T09:00")

    response = await test_client.post(
        "/emails", json={"booking_id": booking.id, "type": "followup"}, headers=admin_headers
    )
    followup = response.json()
    assert followup["scheduled_for"].startswith("2030-03-16")

    # nothing is due yet
    response = await test_client.post("/emails/process", headers=admin_headers)
    assert response.json() == {"processed": 0, "sent_ids": []}

    response = await test_client.delete(f"/emails/{followup['id']}", headers=admin_headers)
    assert response.json()["status"] == "cancelled"

    response = await test_client.get("/emails", params={"booking_id": booking.id}, headers=admin_headers)
    assert [e["status"] for e in response.json()] == ["scheduled", "cancelled"]


async def test_process_due_emails(db_session, booking):
    from app.services.email_scheduler import process_due_emails, schedule_email

    email = await schedule_email(db_session, booking, EmailType.REMINDER, 1)
    sent = await process_due_emails(db_session, now=datetime(2030, 3, 9, 10, 0, tzinfo=timezone.utc))

    assert [e.id for e in sent] == [email.id]
    assert str(sent[0].status) == "sent"
    assert sent[0].sent_at is not None

    again = await process_due_emails(db_session, now=datetime(2030, 3, 9, 11, 0, tzinfo=timezone.utc))
    assert again == []


async def test_email_days_are_bounded(test_client, booking, admin_headers):
    response = await test_client.post(
        "/emails", json={"booking_id": booking.id, "type": "reminder", "days": 31}, headers=admin_headers
    )
    assert response.status_code == 422


async def test_no_emails_for_cancelled_booking(test_client, car, create_booking_factory, admin_headers):
    cancelled = await create_booking_factory(
        car, date(2030, 4, 1), date(2030, 4, 2), status=BookingStatus.CANCELLED
    )
    response = await test_client.post(
        "/emails", json={"booking_id": cancelled.id, "type": "reminder"}, headers=admin_headers
    )
    assert response.status_code == 409


async def test_worker_task_processes_due_emails(db_session, booking, monkeypatch):
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import sessionmaker
    from app.services import tasks_internal
    from app.services.email_scheduler import schedule_email
    from app.services.tasks import celery_app

    assert "process-scheduled-emails" in celery_app.conf.beat_schedule

    monkeypatch.setattr(
        tasks_internal,
        "AsyncSessionWorker",
        sessionmaker(db_session.bind, class_=AsyncSession, expire_on_commit=False),
    )
    email = await schedule_email(db_session, booking, EmailType.REVIEW_REQUEST, 5)

    sent = await tasks_internal.process_scheduled_emails_async(
        now=datetime(2030, 3, 20, tzinfo=timezone.utc)
    )
    assert sent == [email.id]
