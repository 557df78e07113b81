from datetime import date
from typing import Annotated
from pydantic import BeforeValidator
from app.services.availability import to_calendar_date


def _coerce_date(value):
    try:
        return to_calendar_date(value)
    except TypeError as e:
        raise ValueError(str(e))


# accepts ISO dates and date-times; time of day is dropped
CalendarDate = Annotated[date, BeforeValidator(_coerce_date)]
