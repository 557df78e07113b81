"""Lookup helpers shared by the routers"""
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException, Request

from app.core.config import settings
from app.services.availability import DateRange


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[str] = None) -> None:

    if not item:
        if resource_id:
            raise HTTPException(
                status_code=404,
                detail=f"{resource_name} with id {resource_id} not found"
            )
        raise HTTPException(status_code=404, detail=f"{resource_name} not found")


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "anonymous"


def parse_date_range(start_date: Optional[str], end_date: Optional[str]) -> DateRange:
    """Query-string dates to a validated range; bad input is a 422."""
    if not start_date or not end_date:
        raise HTTPException(status_code=422, detail="Both start_date and end_date are required")
    try:
        return DateRange.parse(start_date, end_date).validate()
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def window_or_default(start_date: Optional[str], end_date: Optional[str]) -> DateRange:
    if not start_date and not end_date:
        today = date.today()
        return DateRange(today, today + timedelta(days=settings.AVAILABILITY_WINDOW_DAYS))
    return parse_date_range(start_date, end_date)
