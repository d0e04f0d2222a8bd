"""
Reservation store - persistence and the status lifecycle.
"""

import logging
import sqlite3
from typing import Optional, Union

from .capacity import check_capacity
from .db import new_id, transaction
from .errors import CapacityExceededError, InvalidTransitionError, NotFoundError, PersistenceError
from .models import STATUS_TRANSITIONS, Reservation, ReservationCandidate, ReservationStatus

logger = logging.getLogger(__name__)


def _insert(conn: sqlite3.Connection, candidate: ReservationCandidate) -> str:
    reservation_id = new_id()
    conn.execute("""
        INSERT INTO reservations (id, restaurant_id, customer_name, customer_email, customer_phone,
            reservation_date, reservation_time, number_of_guests, special_requests, status)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, (
        reservation_id,
        candidate.restaurant_id,
        candidate.customer_name,
        candidate.customer_email,
        candidate.customer_phone,
        candidate.reservation_date,
        candidate.reservation_time,
        candidate.number_of_guests,
        candidate.special_requests,
        ReservationStatus.PENDING.value,
    ))
    return reservation_id


def create_reservation(conn: sqlite3.Connection, candidate: ReservationCandidate) -> str:
    """Store a pending reservation without a capacity check. Returns its id."""
    try:
        with transaction(conn):
            return _insert(conn, candidate)
    except sqlite3.IntegrityError as e:
        raise PersistenceError(f"Reservation rejected by the database: {e}") from e
    except sqlite3.Error as e:
        raise PersistenceError(f"Failed to create reservation: {e}") from e


def admit_reservation(conn: sqlite3.Connection, candidate: ReservationCandidate) -> str:
    """
    Check capacity and insert in one write transaction.

    The write lock is held from the capacity read until the insert commits,
    so two submissions for the same slot can never both see the last seats
    as free. Raises CapacityExceededError when the party does not fit.
    """
    try:
        with transaction(conn):
            admitted = check_capacity(
                conn,
                candidate.restaurant_id,
                candidate.reservation_date,
                candidate.reservation_time,
                candidate.number_of_guests,
            )
            if not admitted:
                raise CapacityExceededError(
                    f"Slot {candidate.reservation_date} {candidate.reservation_time} at "
                    f"{candidate.restaurant_id} is full for {candidate.number_of_guests} guests"
                )
            reservation_id = _insert(conn, candidate)
    except sqlite3.IntegrityError as e:
        raise PersistenceError(f"Reservation rejected by the database: {e}") from e
    except sqlite3.Error as e:
        # includes BEGIN IMMEDIATE timing out on the write lock
        raise PersistenceError(f"Failed to create reservation: {e}") from e

    logger.info(
        "Admitted reservation %s: %s guests at %s on %s %s",
        reservation_id, candidate.number_of_guests, candidate.restaurant_id,
        candidate.reservation_date, candidate.reservation_time,
    )
    return reservation_id


def get_reservation(conn: sqlite3.Connection, reservation_id: str) -> Reservation:
    row = conn.execute("SELECT * FROM reservations WHERE id = ?", (reservation_id,)).fetchone()
    if row is None:
        raise NotFoundError(f"Reservation {reservation_id} not found", user_message="Reservation not found")
    return Reservation.from_row(row)


def list_reservations(conn: sqlite3.Connection, restaurant_id: str) -> list[Reservation]:
    """Restaurant's reservations, earliest slot first."""
    rows = conn.execute("""
        SELECT * FROM reservations WHERE restaurant_id = ?
        ORDER BY reservation_date ASC, reservation_time ASC, created_at ASC, id ASC
    """, (restaurant_id,)).fetchall()
    return [Reservation.from_row(row) for row in rows]


def count_by_status(conn: sqlite3.Connection, restaurant_id: str) -> dict[str, int]:
    counts = {status.value: 0 for status in ReservationStatus}
    rows = conn.execute("""
        SELECT status, COUNT(*) AS total FROM reservations
        WHERE restaurant_id = ? GROUP BY status
    """, (restaurant_id,)).fetchall()
    for row in rows:
        counts[row["status"]] = row["total"]
    return counts


def update_reservation_status(
    conn: sqlite3.Connection,
    reservation_id: str,
    new_status: Union[str, ReservationStatus],
    restaurant_id: Optional[str] = None
) -> Reservation:
    """
    Move a reservation along the owner's status lifecycle.

    When restaurant_id is given, reservations of other restaurants are
    treated as not found.
    """
    with transaction(conn):
        row = conn.execute("SELECT * FROM reservations WHERE id = ?", (reservation_id,)).fetchone()
        if row is None or (restaurant_id is not None and row["restaurant_id"] != restaurant_id):
            raise NotFoundError(f"Reservation {reservation_id} not found", user_message="Reservation not found")

        current = ReservationStatus(row["status"])
        try:
            new_status = ReservationStatus(new_status)
        except ValueError:
            raise InvalidTransitionError(current.value, str(new_status))
        if new_status not in STATUS_TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, new_status.value)

        conn.execute(
            "UPDATE reservations SET status = ? WHERE id = ?",
            (new_status.value, reservation_id),
        )

    logger.info("Reservation %s: %s -> %s", reservation_id, current.value, new_status.value)
    reservation = Reservation.from_row(row)
    reservation.status = new_status
    return reservation
