"""
Capacity evaluator - decides whether a party fits in a slot.

A slot is (restaurant, date, time). Pending and confirmed reservations hold
seats; cancelled ones never do. Totals are always read fresh from the
database.
"""

import logging
import sqlite3
from typing import Optional

from .errors import CapacityCheckError, NotFoundError
from .models import ACTIVE_STATUSES

logger = logging.getLogger(__name__)


def get_max_capacity(conn: sqlite3.Connection, restaurant_id: str) -> Optional[int]:
    """Restaurant's seat limit per slot, or None when uncapped."""
    try:
        row = conn.execute(
            "SELECT max_capacity FROM restaurants WHERE id = ?", (restaurant_id,)
        ).fetchone()
    except sqlite3.Error as e:
        raise CapacityCheckError(f"Could not read capacity for {restaurant_id}: {e}") from e
    if row is None:
        raise NotFoundError(f"Restaurant {restaurant_id} not found", user_message="Restaurant not found")
    return row["max_capacity"]


def booked_guests(conn: sqlite3.Connection, restaurant_id: str, date: str, time: str) -> int:
    """Guests currently holding seats in the slot."""
    try:
        row = conn.execute(f"""
            SELECT COALESCE(SUM(number_of_guests), 0) AS total FROM reservations
            WHERE restaurant_id = ? AND reservation_date = ? AND reservation_time = ?
                AND status IN ({", ".join("?" for _ in ACTIVE_STATUSES)})
        """, (restaurant_id, date, time, *ACTIVE_STATUSES)).fetchone()
    except sqlite3.Error as e:
        raise CapacityCheckError(f"Could not total reservations for {restaurant_id} {date} {time}: {e}") from e
    return row["total"]


def remaining_seats(conn: sqlite3.Connection, restaurant_id: str, date: str, time: str) -> Optional[int]:
    """Seats left in the slot, or None when the restaurant is uncapped."""
    max_capacity = get_max_capacity(conn, restaurant_id)
    if max_capacity is None:
        return None
    return max(max_capacity - booked_guests(conn, restaurant_id, date, time), 0)


def check_capacity(
    conn: sqlite3.Connection,
    restaurant_id: str,
    date: str,
    time: str,
    guests: int
) -> bool:
    """Can we fit this party in the slot? Whole parties only."""
    max_capacity = get_max_capacity(conn, restaurant_id)
    if max_capacity is None:
        return True

    booked = booked_guests(conn, restaurant_id, date, time)
    admitted = booked + guests <= max_capacity
    logger.debug(
        "Capacity check %s %s %s: booked=%d requested=%d max=%d admitted=%s",
        restaurant_id, date, time, booked, guests, max_capacity, admitted,
    )
    return admitted
