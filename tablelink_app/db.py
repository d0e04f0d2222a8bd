"""
SQLite setup - connections, schema, write transactions and demo data.
"""

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from typing import Iterator

from .config import DB_PATH, DB_TIMEOUT

logger = logging.getLogger(__name__)


def connect(db_path: str = DB_PATH) -> sqlite3.Connection:
    """Open a connection in autocommit mode; writes go through transaction()."""
    conn = sqlite3.connect(
        db_path,
        timeout=DB_TIMEOUT,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DB_PATH) -> sqlite3.Connection:
    """Connect to DB and create tables if needed."""
    conn = connect(db_path)
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS restaurants(
            id TEXT PRIMARY KEY,
            owner_id TEXT NOT NULL,
            name TEXT NOT NULL,
            description TEXT,
            address TEXT NOT NULL,
            city TEXT NOT NULL,
            phone TEXT NOT NULL,
            email TEXT,
            cuisine_type TEXT,
            price_range TEXT,
            max_capacity INTEGER CHECK (max_capacity IS NULL OR max_capacity > 0),
            is_active INTEGER NOT NULL DEFAULT 1,
            menu_description TEXT,
            faq_info TEXT,
            additional_info TEXT,
            logo_url TEXT,
            primary_color TEXT,
            secondary_color TEXT,
            gallery_photos TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
        );

        CREATE TABLE IF NOT EXISTS reservations(
            id TEXT PRIMARY KEY,
            restaurant_id TEXT NOT NULL,
            customer_name TEXT NOT NULL,
            customer_email TEXT NOT NULL,
            customer_phone TEXT NOT NULL,
            reservation_date TEXT NOT NULL,
            reservation_time TEXT NOT NULL,
            number_of_guests INTEGER NOT NULL CHECK (number_of_guests > 0),
            special_requests TEXT,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'confirmed', 'cancelled')),
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
            FOREIGN KEY (restaurant_id) REFERENCES restaurants(id)
        );

        CREATE INDEX IF NOT EXISTS idx_reservations_slot
            ON reservations(restaurant_id, reservation_date, reservation_time);

        CREATE TABLE IF NOT EXISTS menu_items(
            id TEXT PRIMARY KEY,
            restaurant_id TEXT NOT NULL,
            name TEXT NOT NULL,
            description TEXT,
            price REAL NOT NULL,
            category TEXT NOT NULL,
            is_available INTEGER NOT NULL DEFAULT 1,
            FOREIGN KEY (restaurant_id) REFERENCES restaurants(id)
        );

        CREATE TABLE IF NOT EXISTS reviews(
            id TEXT PRIMARY KEY,
            restaurant_id TEXT NOT NULL,
            customer_name TEXT NOT NULL,
            rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
            comment TEXT,
            photos TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
            FOREIGN KEY (restaurant_id) REFERENCES restaurants(id)
        );

        CREATE TABLE IF NOT EXISTS user_roles(
            user_id TEXT NOT NULL,
            role TEXT NOT NULL,
            PRIMARY KEY (user_id, role)
        );
    """)
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection, immediate: bool = True) -> Iterator[sqlite3.Connection]:
    """
    Run a block inside one write transaction.

    BEGIN IMMEDIATE takes the database write lock up front, so reads made
    inside the block cannot go stale before the block's own writes land.
    """
    conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    else:
        conn.execute("COMMIT")


def new_id() -> str:
    return str(uuid.uuid4())


def seed_demo_restaurant_if_empty(conn: sqlite3.Connection) -> None:
    """Add one demo restaurant with a small menu if the table is empty."""
    if conn.execute("SELECT COUNT(*) FROM restaurants").fetchone()[0] > 0:
        return

    restaurant_id = new_id()
    menu = [
        ("Burrata", "Starters", 9.5, "Creamy burrata with heirloom tomatoes"),
        ("Croquetas de jamón", "Starters", 7.0, None),
        ("Risotto ai funghi", "Mains", 16.0, "Carnaroli rice, porcini, parmesan"),
        ("Grilled sea bass", "Mains", 21.5, None),
        ("Tiramisu", "Desserts", 6.5, None),
    ]
    with transaction(conn):
        conn.execute("""
            INSERT INTO restaurants (id, owner_id, name, description, address, city, phone,
                email, cuisine_type, price_range, max_capacity, faq_info)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            restaurant_id, "demo-owner", "La Bella Mesa", "Seasonal Mediterranean cooking",
            "Calle Mayor 12", "Madrid", "+34 600 123 456", "hola@labellamesa.example",
            "Mediterranean", "$$", 40, "We are open Tuesday to Sunday. Dogs welcome on the terrace.",
        ))
        conn.executemany("""
            INSERT INTO menu_items (id, restaurant_id, name, category, price, description)
            VALUES (?, ?, ?, ?, ?, ?)
        """, [(new_id(), restaurant_id, *item) for item in menu])
    logger.info("Seeded demo restaurant %s", restaurant_id)
