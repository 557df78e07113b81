from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"

    def __str__(self):
        return self.value


class Transmission(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    CVT = "cvt"

    def __str__(self):
        return self.value


class FuelType(str, Enum):
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"

    def __str__(self):
        return self.value


class CarType(str, Enum):
    SEDAN = "sedan"
    SUV = "suv"
    HATCHBACK = "hatchback"
    COUPE = "coupe"
    CONVERTIBLE = "convertible"
    WAGON = "wagon"
    VAN = "van"
    PICKUP = "pickup"

    def __str__(self):
        return self.value


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self):
        return self.value


class CustomerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

    def __str__(self):
        return self.value


class NotificationType(str, Enum):
    NEW_BOOKING = "new_booking"
    BOOKING_UPDATE = "booking_update"
    BOOKING_CANCELLED = "booking_cancelled"
    CUSTOMER_UPDATE = "customer_update"
    SYSTEM = "system"

    def __str__(self):
        return self.value


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self):
        return self.value


class DocumentType(str, Enum):
    BOOKING_CONFIRMATION = "booking-confirmation"
    RECEIPT = "receipt"
    RENTAL_AGREEMENT = "rental-agreement"
    INVOICE = "invoice"

    def __str__(self):
        return self.value


class EmailType(str, Enum):
    REMINDER = "reminder"
    FOLLOWUP = "followup"
    REVIEW_REQUEST = "review-request"

    def __str__(self):
        return self.value


class EmailStatus(str, Enum):
    SCHEDULED = "scheduled"
    SENT = "sent"
    CANCELLED = "cancelled"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    CREATE_CAR = "create_car"
    UPDATE_CAR = "update_car"
    DELETE_CAR = "delete_car"
    APPROVE_BOOKING = "approve_booking"
    REJECT_BOOKING = "reject_booking"
    CANCEL_BOOKING = "cancel_booking"
    COMPLETE_BOOKING = "complete_booking"
    CREATE_LOCATION = "create_location"
    UPDATE_LOCATION = "update_location"
    DELETE_LOCATION = "delete_location"
    UPDATE_CUSTOMER = "update_customer"
    DELETE_CUSTOMER = "delete_customer"
    GENERATE_DOCUMENT = "generate_document"
    DELETE_DOCUMENT = "delete_document"
    SCHEDULE_EMAIL = "schedule_email"
    CANCEL_EMAIL = "cancel_email"
    LOGIN = "login"

    def __str__(self):
        return self.value
