"""
Reservation intake - turns a raw booking form into a validated candidate.
"""

import datetime
import re
from typing import Any, Optional, Union

from .config import MAX_GUESTS, MIN_GUESTS
from .errors import ValidationError
from .models import ReservationCandidate, ReservationStatus

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _required_text(form: dict, field: str, label: str) -> str:
    value = form.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, f"{label} is required")
    return value.strip()


def parse_date(value: Union[str, datetime.date, None], today: datetime.date) -> datetime.date:
    if isinstance(value, datetime.datetime):
        value = value.date()
    elif isinstance(value, str):
        try:
            value = datetime.date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError("reservation_date", "Date must be in YYYY-MM-DD format")
    elif not isinstance(value, datetime.date):
        raise ValidationError("reservation_date", "Date is required")

    if value < today:
        raise ValidationError("reservation_date", "Reservations can't be made for past dates")
    return value


def parse_time(value: Union[str, datetime.time, None]) -> datetime.time:
    if isinstance(value, datetime.time):
        return value
    if isinstance(value, str):
        try:
            return datetime.time.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError("reservation_time", "Time must be a valid time of day (HH:MM)")


def parse_guests(value: Any) -> int:
    # bool is an int subclass; a checkbox value is never a party size
    if isinstance(value, bool):
        raise ValidationError("number_of_guests", "Number of guests must be a whole number")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("number_of_guests", "Number of guests must be a whole number")
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValidationError("number_of_guests", "Number of guests must be a whole number")
    elif not isinstance(value, int):
        raise ValidationError("number_of_guests", "Number of guests must be a whole number")

    if not MIN_GUESTS <= value <= MAX_GUESTS:
        raise ValidationError(
            "number_of_guests",
            f"Number of guests must be between {MIN_GUESTS} and {MAX_GUESTS}",
        )
    return value


def build_candidate(form: dict, today: Optional[datetime.date] = None) -> ReservationCandidate:
    """
    Validate a booking form and normalize it into a candidate.

    Raises ValidationError on the first bad field. Any status sent by the
    client is ignored; new reservations always start pending.
    """
    today = today or datetime.date.today()

    restaurant_id = _required_text(form, "restaurant_id", "Restaurant")
    name = _required_text(form, "customer_name", "Name")
    email = _required_text(form, "customer_email", "Email")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("customer_email", "Please enter a valid email address")
    phone = _required_text(form, "customer_phone", "Phone number")

    date = parse_date(form.get("reservation_date"), today)
    time = parse_time(form.get("reservation_time"))
    guests = parse_guests(form.get("number_of_guests"))

    special_requests = form.get("special_requests")
    if isinstance(special_requests, str):
        special_requests = special_requests.strip() or None
    else:
        special_requests = None

    return ReservationCandidate(
        restaurant_id=restaurant_id,
        customer_name=name,
        customer_email=email,
        customer_phone=phone,
        reservation_date=date.isoformat(),
        reservation_time=time.strftime("%H:%M"),
        number_of_guests=guests,
        special_requests=special_requests,
        status=ReservationStatus.PENDING,
    )
