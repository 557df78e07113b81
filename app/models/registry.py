from app.models.user import User
from app.models.audit import Audit
from app.models.location import Location
from app.models.car import Car
from app.models.customer import Customer
from app.models.booking import Booking
from app.models.notification import Notification
from app.models.document import Document
from app.models.scheduled_email import ScheduledEmail

__all__ = [
    "User",
    "Audit",
    "Location",
    "Car",
    "Customer",
    "Booking",
    "Notification",
    "Document",
    "ScheduledEmail",
]
