"""
Booking service - the operations the booking page and owner dashboard call.

submit_reservation() and set_reservation_status() raise typed errors;
book_table() and change_status() wrap them for a user action and always
return a ToolResult with a message the page can show.
"""

import datetime
import logging
import sqlite3
from dataclasses import asdict
from typing import Optional

from .errors import TableLinkError, ValidationError
from .intake import build_candidate
from .models import Reservation, ReservationStatus, ToolResult
from .reservations import admit_reservation, list_reservations, update_reservation_status
from .restaurants import get_active_restaurant

logger = logging.getLogger(__name__)

__all__ = [
    "submit_reservation",
    "list_reservations",
    "set_reservation_status",
    "book_table",
    "change_status",
]


def submit_reservation(
    conn: sqlite3.Connection,
    form: dict,
    today: Optional[datetime.date] = None
) -> str:
    """Validate, check capacity and store a booking. Returns the new reservation id."""
    candidate = build_candidate(form, today=today)
    if get_active_restaurant(conn, candidate.restaurant_id) is None:
        raise ValidationError("restaurant_id", "This restaurant doesn't exist or isn't taking bookings")
    return admit_reservation(conn, candidate)


def set_reservation_status(
    conn: sqlite3.Connection,
    reservation_id: str,
    status: str,
    restaurant_id: Optional[str] = None
) -> Reservation:
    return update_reservation_status(conn, reservation_id, status, restaurant_id=restaurant_id)


def book_table(conn: sqlite3.Connection, form: dict, today: Optional[datetime.date] = None) -> ToolResult:
    """Booking page submit handler."""
    try:
        reservation_id = submit_reservation(conn, form, today=today)
    except ValidationError as e:
        return ToolResult(success=False, data={"field": e.field}, error=e.user_message)
    except TableLinkError as e:
        logger.warning("Reservation not created: %s", e)
        return ToolResult(success=False, data={"kind": type(e).__name__}, error=e.user_message)
    except sqlite3.Error as e:
        logger.error("Reservation lookup failed: %s", e)
        return ToolResult(success=False, data={}, error="We couldn't save your reservation. Please try again.")

    return ToolResult(
        success=True,
        data={
            "reservation_id": reservation_id,
            "status": ReservationStatus.PENDING.value,
            "message": "Reservation received! The restaurant will contact you soon.",
        },
    )


def change_status(
    conn: sqlite3.Connection,
    reservation_id: str,
    status: str,
    restaurant_id: Optional[str] = None
) -> ToolResult:
    """Owner dashboard confirm/cancel handler."""
    try:
        reservation = set_reservation_status(conn, reservation_id, status, restaurant_id=restaurant_id)
    except TableLinkError as e:
        logger.warning("Status change for %s rejected: %s", reservation_id, e)
        return ToolResult(success=False, data={"kind": type(e).__name__}, error=e.user_message)
    except sqlite3.Error as e:
        logger.error("Status change for %s failed: %s", reservation_id, e)
        return ToolResult(success=False, data={}, error="We couldn't update the reservation. Please try again.")

    data = asdict(reservation)
    data["status"] = reservation.status.value
    return ToolResult(success=True, data=data)
