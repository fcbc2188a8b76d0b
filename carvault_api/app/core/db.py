"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``) and applying migrations on application start
(``init_db``).  Every service call opens its own connection and closes
it when done, so there is no connection state shared between requests.

Uniqueness of user e‑mails and car license plates is enforced by
``UNIQUE`` constraints here, in addition to the checks performed by
the services, so that two concurrent writes cannot both succeed.

Maintenance and expense rows deliberately carry no foreign key to
``cars``: whether they survive the deletion of their car is decided by
the ``ON_CAR_DELETE`` setting, not by the schema.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS cars (
            id TEXT PRIMARY KEY,
            owner_id TEXT NOT NULL,
            make TEXT NOT NULL,
            model TEXT NOT NULL,
            year INTEGER NOT NULL,
            color TEXT NOT NULL,
            license_plate TEXT NOT NULL UNIQUE,
            vin TEXT,
            mileage INTEGER NOT NULL DEFAULT 0 CHECK (mileage >= 0),
            image TEXT,
            notes TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(owner_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS maintenance (
            id TEXT PRIMARY KEY,
            car_id TEXT NOT NULL,
            owner_id TEXT NOT NULL,
            type TEXT NOT NULL,
            description TEXT NOT NULL,
            date TEXT NOT NULL,
            mileage INTEGER NOT NULL CHECK (mileage >= 0),
            cost REAL NOT NULL CHECK (cost >= 0),
            location TEXT,
            next_service_date TEXT,
            next_service_mileage INTEGER CHECK (next_service_mileage >= 0),
            receipt TEXT,
            notes TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(owner_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS expenses (
            id TEXT PRIMARY KEY,
            car_id TEXT NOT NULL,
            owner_id TEXT NOT NULL,
            category TEXT NOT NULL,
            description TEXT NOT NULL,
            date TEXT NOT NULL,
            amount REAL NOT NULL CHECK (amount >= 0),
            mileage INTEGER CHECK (mileage >= 0),
            location TEXT,
            receipt TEXT,
            notes TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(owner_id) REFERENCES users(id)
        );
        """,
    ),
    # Migration 2: indices on the owner and car columns used by every
    # scoped query
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_cars_owner_id ON cars(owner_id);
        CREATE INDEX IF NOT EXISTS idx_maintenance_owner_id ON maintenance(owner_id);
        CREATE INDEX IF NOT EXISTS idx_maintenance_car_id ON maintenance(car_id);
        CREATE INDEX IF NOT EXISTS idx_expenses_owner_id ON expenses(owner_id);
        CREATE INDEX IF NOT EXISTS idx_expenses_car_id ON expenses(car_id);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # carvault_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Timestamps are stored as ISO‑8601 text and parsed by the
    Pydantic response models, so no SQLite type detection is enabled.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    # Foreign key enforcement is off by default in SQLite and must be
    # enabled per connection.
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  If you add a new migration, append it with an
    incremented version number.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
