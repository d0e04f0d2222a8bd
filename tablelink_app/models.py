"""
Dataclasses for restaurants, reservations, menu items and reviews.
"""

import json
import sqlite3
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Allowed owner-driven status changes; anything else is rejected.
STATUS_TRANSITIONS = {
    ReservationStatus.PENDING: {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED},
    ReservationStatus.CONFIRMED: {ReservationStatus.CANCELLED},
    ReservationStatus.CANCELLED: set(),
}

# Statuses that hold seats in a slot.
ACTIVE_STATUSES = (ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value)


@dataclass
class Restaurant:
    id: str
    owner_id: str
    name: str
    address: str
    city: str
    phone: str
    description: Optional[str] = None
    email: Optional[str] = None
    cuisine_type: Optional[str] = None
    price_range: Optional[str] = None
    max_capacity: Optional[int] = None
    is_active: bool = True
    menu_description: Optional[str] = None
    faq_info: Optional[str] = None
    additional_info: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    gallery_photos: list[str] = field(default_factory=list)
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Restaurant":
        data = dict(row)
        data["is_active"] = bool(data["is_active"])
        data["gallery_photos"] = json.loads(data["gallery_photos"] or "[]")
        return cls(**data)


@dataclass
class ReservationCandidate:
    """A validated booking request that has not been stored yet."""
    restaurant_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    reservation_date: str  # YYYY-MM-DD
    reservation_time: str  # HH:MM
    number_of_guests: int
    special_requests: Optional[str] = None
    status: ReservationStatus = ReservationStatus.PENDING


@dataclass
class Reservation:
    id: str
    restaurant_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    reservation_date: str
    reservation_time: str
    number_of_guests: int
    special_requests: Optional[str]
    status: ReservationStatus
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Reservation":
        data = dict(row)
        data["status"] = ReservationStatus(data["status"])
        return cls(**data)


@dataclass
class MenuItem:
    id: str
    restaurant_id: str
    name: str
    price: float
    category: str
    description: Optional[str] = None
    is_available: bool = True

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "MenuItem":
        data = dict(row)
        data["is_available"] = bool(data["is_available"])
        return cls(**data)


@dataclass
class Review:
    id: str
    restaurant_id: str
    customer_name: str
    rating: int
    comment: Optional[str]
    photos: list[str]
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Review":
        data = dict(row)
        data["photos"] = json.loads(data["photos"] or "[]")
        return cls(**data)


@dataclass
class ToolResult:
    success: bool
    data: dict
    error: Optional[str] = None
