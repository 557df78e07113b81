"""Booking documents.

Documents are rendered as HTML and stored; turning them into real PDF files
is left to whatever sits downstream of ``GET /documents/{id}``.
"""
import logging
from datetime import datetime, timezone
from html import escape
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import DocumentType
from app.db.repositories import DocumentRepository
from app.models.document import Document
from app.services.availability import DateRange, compute_duration, compute_price
from app.services.pricing import apply_tax
from app.core.config import settings

logger = logging.getLogger(__name__)

TITLES = {
    DocumentType.BOOKING_CONFIRMATION: "Booking Confirmation",
    DocumentType.RECEIPT: "Receipt",
    DocumentType.RENTAL_AGREEMENT: "Rental Agreement",
    DocumentType.INVOICE: "Invoice",
}

PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{title}</title></head>
<body>
<h1>{title}</h1>
{body}
<footer><p>&copy; {year} Car Rental Service. All rights reserved.</p></footer>
</body>
</html>
"""


def _money(value) -> str:
    return f"${value:,.2f}"


def _e(value) -> str:
    return escape(str(value)) if value is not None else "N/A"


def _details(booking, car, location) -> str:
    return (
        "<section><h2>Booking Details</h2>"
        f"<p><strong>Booking ID:</strong> {_e(booking.id)}</p>"
        f"<p><strong>Confirmation Code:</strong> {_e(booking.confirmation_code)}</p>"
        f"<p><strong>Customer:</strong> {_e(booking.name)}</p>"
        f"<p><strong>Email:</strong> {_e(booking.email)}</p>"
        f"<p><strong>Phone:</strong> {_e(booking.phone)}</p>"
        f"<p><strong>Dates:</strong> {booking.start_date:%b %d, %Y} to {booking.end_date:%b %d, %Y}</p>"
        "</section>"
        "<section><h2>Car Details</h2>"
        f"<p><strong>Car:</strong> {_e(car.make)} {_e(car.model)} ({car.year})</p>"
        f"<p><strong>Color:</strong> {_e(car.color)}</p>"
        f"<p><strong>License Plate:</strong> {_e(car.license_plate)}</p>"
        "</section>"
        "<section><h2>Location Details</h2>"
        f"<p><strong>Name:</strong> {_e(location.name)}</p>"
        f"<p><strong>Address:</strong> {_e(location.address)}, {_e(location.city)}, "
        f"{_e(location.state)} {_e(location.zip_code)}</p>"
        f"<p><strong>Phone:</strong> {_e(location.phone)}</p>"
        "</section>"
    )


def _charges(booking, car, label: str) -> str:
    span = DateRange.of(booking)
    days = compute_duration(span)
    subtotal = compute_price(car, span)
    tax = apply_tax(subtotal)
    return (
        f"<section><h2>{label}</h2><table>"
        f"<tr><td>Car rental ({days} day{'s' if days != 1 else ''} x {_money(car.price_per_day)})</td>"
        f"<td>{_money(subtotal)}</td></tr>"
        f"<tr><td>Tax ({settings.TAX_RATE * 100:.0f}%)</td><td>{_money(tax)}</td></tr>"
        f"<tr><th>Total</th><th>{_money(subtotal + tax)}</th></tr>"
        "</table></section>"
    )


def render_document(doc_type: DocumentType, booking, car, location, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    details = _details(booking, car, location)
    if doc_type == DocumentType.BOOKING_CONFIRMATION:
        body = (
            "<p>Thank you for choosing our car rental service!</p>"
            f"{details}"
            f"<p><strong>Total Price:</strong> {_money(booking.total_price)}</p>"
            "<section><h2>Next Steps</h2><p>Please bring the following items when you pick up your car:</p>"
            "<ul><li>Valid driver's license</li><li>Credit card in your name</li>"
            "<li>This booking confirmation</li></ul>"
            "<p>If you need to modify or cancel your booking, please contact us at least "
            "24 hours before your pickup time.</p></section>"
        )
    elif doc_type == DocumentType.RECEIPT:
        body = (
            f"<p>Receipt #: R-{now:%y%m%d%H%M%S}</p><p>Date: {now:%b %d, %Y}</p>"
            f"{details}{_charges(booking, car, 'Payment Details')}"
        )
    elif doc_type == DocumentType.INVOICE:
        body = (
            f"<p>Invoice #: INV-{escape(booking.id)}</p><p>Issued: {now:%b %d, %Y}</p>"
            f"{details}{_charges(booking, car, 'Charges')}"
        )
    else:
        body = (
            f"{details}"
            "<section><h2>Terms and Conditions</h2><ol>"
            "<li>The renter must hold a valid driver's license for the entire rental period.</li>"
            "<li>The car must be returned to the pickup location by the end date.</li>"
            "<li>The car must be returned with the same fuel level as at pickup.</li>"
            "<li>Smoking is not permitted in the vehicle.</li>"
            "<li>The renter is responsible for traffic violations during the rental period.</li>"
            "</ol></section>"
            "<section><p>Renter signature: ____________________</p>"
            "<p>Company representative: ____________________</p></section>"
        )
    return PAGE.format(title=TITLES[doc_type], body=body, year=now.year)


async def generate_document(db: AsyncSession, doc_type: DocumentType, booking, car, location) -> Document:
    document = Document(
        booking_id=booking.id,
        type=doc_type,
        title=TITLES[doc_type],
        filename=f"{DocumentType(doc_type).value}-{booking.id}.pdf",
        content=render_document(doc_type, booking, car, location),
    )
    await DocumentRepository(db).add(document)
    await db.commit()
    await db.refresh(document)
    logger.info(f"Generated {doc_type} document {document.id} for booking {booking.id}")
    return document
