from app.models.booking import Booking
from app.models.car import Car
from app.models.customer import Customer
from app.models.document import Document
from app.models.location import Location
from app.models.notification import Notification
from app.models.scheduled_email import ScheduledEmail
from app.schemas.booking import BookingOut
from app.schemas.car import CarOut
from app.schemas.customer import CustomerOut
from app.schemas.document import DocumentOut
from app.schemas.email import ScheduledEmailOut
from app.schemas.location import LocationOut
from app.schemas.notification import NotificationOut


def build_car_response(car: Car) -> CarOut:
    return CarOut(
        id=car.id,
        make=car.make,
        model=car.model,
        year=car.year,
        transmission=car.transmission,
        fuel_type=car.fuel_type,
        seats=car.seats,
        price_per_day=car.price_per_day,
        location_id=car.location_id,
        car_type=car.car_type,
        color=car.color,
        license_plate=car.license_plate,
        description=car.description,
        image=car.image,
        available=car.available,
        created_at=car.created_at,
        updated_at=car.updated_at,
    )


def build_booking_response(booking: Booking) -> BookingOut:
    return BookingOut(
        id=booking.id,
        car_id=booking.car_id,
        customer_id=booking.customer_id,
        location_id=booking.location_id,
        name=booking.name,
        email=booking.email,
        phone=booking.phone,
        start_date=booking.start_date,
        end_date=booking.end_date,
        status=booking.status,
        total_price=booking.total_price,
        confirmation_code=booking.confirmation_code,
        cancellation_reason=booking.cancellation_reason,
        rejection_reason=booking.rejection_reason,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
    )


def build_location_response(location: Location) -> LocationOut:
    return LocationOut(
        id=location.id,
        name=location.name,
        address=location.address,
        city=location.city,
        state=location.state,
        zip_code=location.zip_code,
        phone=location.phone,
        email=location.email,
        hours=location.hours,
        latitude=location.latitude,
        longitude=location.longitude,
        created_at=location.created_at,
    )


def build_customer_response(customer: Customer) -> CustomerOut:
    return CustomerOut(
        id=customer.id,
        name=customer.name,
        email=customer.email,
        phone=customer.phone,
        address=customer.address,
        city=customer.city,
        state=customer.state,
        zip_code=customer.zip_code,
        country=customer.country,
        status=customer.status,
        total_bookings=customer.total_bookings,
        total_spent=customer.total_spent,
        created_at=customer.created_at,
        updated_at=customer.updated_at,
    )


def build_notification_response(notification: Notification) -> NotificationOut:
    return NotificationOut(
        id=notification.id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        read=notification.read,
        related_id=notification.related_id,
        link_to=notification.link_to,
        priority=notification.priority,
        created_at=notification.created_at,
    )


def build_document_response(document: Document) -> DocumentOut:
    return DocumentOut(
        id=document.id,
        booking_id=document.booking_id,
        type=document.type,
        title=document.title,
        filename=document.filename,
        url=f"/documents/{document.id}",
        created_at=document.created_at,
    )


def build_email_response(email: ScheduledEmail) -> ScheduledEmailOut:
    return ScheduledEmailOut(
        id=email.id,
        booking_id=email.booking_id,
        type=email.type,
        recipient=email.recipient,
        subject=email.subject,
        scheduled_for=email.scheduled_for,
        status=email.status,
        sent_at=email.sent_at,
        created_at=email.created_at,
    )


def build_response_list(builder, items: list) -> list:
    return [builder(item) for item in items]
