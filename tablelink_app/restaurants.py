"""
Restaurant profile, menu and review operations for the owner pages.
"""

import json
import logging
import re
import sqlite3
from typing import Optional

from .config import PUBLIC_BASE_URL
from .db import new_id, transaction
from .errors import NotFoundError, PersistenceError, ValidationError
from .models import MenuItem, Restaurant, Review

logger = logging.getLogger(__name__)

OWNER_ROLE = "restaurant_owner"
COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")

EDITABLE_FIELDS = {
    "name", "description", "address", "city", "phone", "email", "cuisine_type",
    "price_range", "max_capacity", "is_active", "menu_description", "faq_info",
    "additional_info", "logo_url", "primary_color", "secondary_color",
}
REQUIRED_FIELDS = ("name", "address", "city", "phone")


def _check_fields(fields: dict) -> dict:
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(sorted(unknown)[0], "This field can't be changed")

    cleaned = {}
    for key, value in fields.items():
        if isinstance(value, str):
            value = value.strip()
        if key in REQUIRED_FIELDS and not value:
            raise ValidationError(key, f"{key.replace('_', ' ').capitalize()} is required")
        if key == "max_capacity" and value is not None:
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValidationError(key, "Maximum capacity must be a positive whole number")
        if key in ("primary_color", "secondary_color") and value and not COLOR_PATTERN.match(value):
            raise ValidationError(key, "Colors must look like #RRGGBB")
        if key == "is_active":
            value = int(bool(value))
        cleaned[key] = value if value != "" else None
    return cleaned


# --- Restaurants ---

def create_restaurant(conn: sqlite3.Connection, owner_id: str, **details) -> str:
    """Give the owner the restaurant_owner role and create an active restaurant."""
    if not owner_id:
        raise ValidationError("owner_id", "You need to be signed in to create a restaurant")
    for key in REQUIRED_FIELDS:
        details.setdefault(key, "")
    details = _check_fields(details)

    restaurant_id = new_id()
    columns = ["id", "owner_id", *details]
    try:
        with transaction(conn):
            conn.execute(
                "INSERT OR IGNORE INTO user_roles (user_id, role) VALUES (?, ?)",
                (owner_id, OWNER_ROLE),
            )
            conn.execute(
                f"INSERT INTO restaurants ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
                (restaurant_id, owner_id, *details.values()),
            )
    except sqlite3.Error as e:
        raise PersistenceError(f"Failed to create restaurant: {e}",
                               user_message="We couldn't create the restaurant. Please try again.") from e

    logger.info("Owner %s created restaurant %s", owner_id, restaurant_id)
    return restaurant_id


def get_restaurant(conn: sqlite3.Connection, restaurant_id: str) -> Restaurant:
    row = conn.execute("SELECT * FROM restaurants WHERE id = ?", (restaurant_id,)).fetchone()
    if row is None:
        raise NotFoundError(f"Restaurant {restaurant_id} not found", user_message="Restaurant not found")
    return Restaurant.from_row(row)


def get_active_restaurant(conn: sqlite3.Connection, restaurant_id: str) -> Optional[Restaurant]:
    """The restaurant if it exists and takes bookings, else None."""
    row = conn.execute(
        "SELECT * FROM restaurants WHERE id = ? AND is_active = 1", (restaurant_id,)
    ).fetchone()
    return Restaurant.from_row(row) if row else None


def get_restaurant_for_owner(conn: sqlite3.Connection, owner_id: str) -> Optional[Restaurant]:
    row = conn.execute(
        "SELECT * FROM restaurants WHERE owner_id = ? ORDER BY created_at LIMIT 1", (owner_id,)
    ).fetchone()
    return Restaurant.from_row(row) if row else None


def update_restaurant(conn: sqlite3.Connection, restaurant_id: str, **fields) -> Restaurant:
    """Save settings edits. Only known profile fields may be changed."""
    fields = _check_fields(fields)
    if fields:
        assignments = ", ".join(f"{key} = ?" for key in fields)
        with transaction(conn):
            cursor = conn.execute(
                f"UPDATE restaurants SET {assignments} WHERE id = ?",
                (*fields.values(), restaurant_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Restaurant {restaurant_id} not found", user_message="Restaurant not found")
        logger.info("Updated restaurant %s: %s", restaurant_id, ", ".join(fields))
    return get_restaurant(conn, restaurant_id)


def _save_gallery(conn: sqlite3.Connection, restaurant_id: str, photos: list[str]) -> None:
    with transaction(conn):
        conn.execute(
            "UPDATE restaurants SET gallery_photos = ? WHERE id = ?",
            (json.dumps(photos), restaurant_id),
        )


def add_gallery_photo(conn: sqlite3.Connection, restaurant_id: str, photo_url: str) -> list[str]:
    if not photo_url or not photo_url.strip():
        raise ValidationError("photo_url", "Photo URL is required")
    photos = get_restaurant(conn, restaurant_id).gallery_photos + [photo_url.strip()]
    _save_gallery(conn, restaurant_id, photos)
    return photos


def remove_gallery_photo(conn: sqlite3.Connection, restaurant_id: str, index: int) -> list[str]:
    photos = get_restaurant(conn, restaurant_id).gallery_photos
    if not 0 <= index < len(photos):
        raise ValidationError("index", "That photo doesn't exist")
    photos = photos[:index] + photos[index + 1:]
    _save_gallery(conn, restaurant_id, photos)
    return photos


def booking_link(restaurant_id: str, base_url: Optional[str] = None) -> str:
    """Public link customers use to book."""
    return f"{(base_url or PUBLIC_BASE_URL).rstrip('/')}/?restaurant={restaurant_id}"


# --- Menu ---

def add_menu_item(
    conn: sqlite3.Connection,
    restaurant_id: str,
    name: str,
    price: float,
    category: str,
    description: Optional[str] = None
) -> str:
    if not name or not name.strip():
        raise ValidationError("name", "Dish name is required")
    if not category or not category.strip():
        raise ValidationError("category", "Category is required")
    try:
        price = float(price)
    except (TypeError, ValueError):
        raise ValidationError("price", "Price must be a number")
    if price < 0:
        raise ValidationError("price", "Price can't be negative")

    item_id = new_id()
    try:
        with transaction(conn):
            conn.execute("""
                INSERT INTO menu_items (id, restaurant_id, name, description, price, category)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (item_id, restaurant_id, name.strip(), (description or "").strip() or None,
                  price, category.strip()))
    except sqlite3.Error as e:
        raise PersistenceError(f"Failed to add menu item: {e}",
                               user_message="We couldn't add the dish. Please try again.") from e
    return item_id


def delete_menu_item(conn: sqlite3.Connection, item_id: str, restaurant_id: Optional[str] = None) -> None:
    query = "DELETE FROM menu_items WHERE id = ?"
    params = [item_id]
    if restaurant_id is not None:
        query += " AND restaurant_id = ?"
        params.append(restaurant_id)
    with transaction(conn):
        if conn.execute(query, params).rowcount == 0:
            raise NotFoundError(f"Menu item {item_id} not found", user_message="Dish not found")


def list_menu_items(conn: sqlite3.Connection, restaurant_id: str, available_only: bool = False) -> list[MenuItem]:
    query = "SELECT * FROM menu_items WHERE restaurant_id = ?"
    if available_only:
        query += " AND is_available = 1"
    query += " ORDER BY category ASC, name ASC"
    return [MenuItem.from_row(row) for row in conn.execute(query, (restaurant_id,)).fetchall()]


# --- Reviews ---

def add_review(
    conn: sqlite3.Connection,
    restaurant_id: str,
    customer_name: str,
    rating: int,
    comment: Optional[str] = None,
    photos: Optional[list[str]] = None
) -> str:
    if not customer_name or not customer_name.strip():
        raise ValidationError("customer_name", "Name is required")
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("rating", "Rating must be between 1 and 5")

    review_id = new_id()
    try:
        with transaction(conn):
            conn.execute("""
                INSERT INTO reviews (id, restaurant_id, customer_name, rating, comment, photos)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (review_id, restaurant_id, customer_name.strip(), rating,
                  (comment or "").strip() or None, json.dumps(photos or [])))
    except sqlite3.Error as e:
        raise PersistenceError(f"Failed to add review: {e}",
                               user_message="We couldn't save your review. Please try again.") from e
    return review_id


def list_reviews(conn: sqlite3.Connection, restaurant_id: str) -> list[Review]:
    """Newest first."""
    rows = conn.execute(
        "SELECT * FROM reviews WHERE restaurant_id = ? ORDER BY created_at DESC, id ASC",
        (restaurant_id,),
    ).fetchall()
    return [Review.from_row(row) for row in rows]


def average_rating(conn: sqlite3.Connection, restaurant_id: str) -> Optional[float]:
    row = conn.execute(
        "SELECT AVG(rating) AS average FROM reviews WHERE restaurant_id = ?", (restaurant_id,)
    ).fetchone()
    return round(row["average"], 1) if row["average"] is not None else None
