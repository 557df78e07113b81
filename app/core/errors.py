"""Domain errors and their HTTP translation"""
import logging
from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RentalError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message}


class InvalidRangeError(RentalError):
    """End date falls before start date."""
    status_code = 422

    def __init__(self, start, end):
        super().__init__(f"End date {end} cannot be before start date {start}")
        self.start = start
        self.end = end


class BookingConflictError(RentalError):
    status_code = 409

    def __init__(self, car_id: str, conflicting_ids: Iterable[str]):
        self.car_id = car_id
        self.conflicting_ids = list(conflicting_ids)
        super().__init__(f"Car {car_id} is not available for the requested dates")

    def to_dict(self) -> dict:
        return {"detail": self.message, "conflicts": self.conflicting_ids}


class InvalidTransitionError(RentalError):
    status_code = 409

    def __init__(self, booking_id: str, current, target):
        super().__init__(f"Booking {booking_id} cannot move from {current} to {target}")
        self.current = current
        self.target = target


class CarInUseError(RentalError):
    status_code = 409

    def __init__(self, car_id: str):
        super().__init__(f"Car {car_id} still has pending or confirmed bookings")


async def rental_error_handler(request: Request, exc: RentalError) -> JSONResponse:
    logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RentalError, rental_error_handler)
