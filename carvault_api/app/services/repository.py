"""
Owner‑scoped persistence shared by the car, maintenance and expense
services.

``OwnedRepository`` implements list/get/create/update/delete against a
single table whose rows carry an ``owner_id``.  Every statement it
issues includes ``owner_id = ?`` bound to the authenticated caller, and
lookups test existence and ownership in the same ``WHERE`` clause, so a
record owned by someone else is reported exactly like a record that
does not exist.

Subclasses declare the table, the column order used for listings and
a ``_validate`` hook that runs before every write.  ``CarLinkedRepository``
adds what maintenance and expenses have in common: a ``car_id`` that
must point at one of the caller's cars and a denormalised summary of
that car in every response.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel

from ..core.clock import get_today, to_utc_iso, utc_now
from ..core.db import get_connection
from ..core.exceptions import ConflictError, NotFoundError
from ..schemas.common import CarBrief


logger = logging.getLogger(__name__)


def require_owned_car(cursor: sqlite3.Cursor, owner_id: str, car_id: str) -> sqlite3.Row:
    """Return the car row if ``car_id`` exists and belongs to ``owner_id``.

    Raises ``NotFoundError`` otherwise; a car owned by another user is
    indistinguishable from a missing one.
    """
    row = cursor.execute(
        "SELECT id, make, model, year, license_plate FROM cars WHERE id = ? AND owner_id = ?",
        (car_id, owner_id),
    ).fetchone()
    if row is None:
        raise NotFoundError("Car not found")
    return row


def to_columns(values: Dict[str, Any]) -> Dict[str, Any]:
    """Convert validated schema values into SQLite column values."""
    columns: Dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = to_utc_iso(value)
        columns[key] = value
    return columns


class OwnedRepository:
    """Base class for services whose records belong to a single user."""

    table: str = ""
    entity_name: str = "Record"
    order_by: str = "r.created_at DESC, r.rowid DESC"
    read_model: type[BaseModel]

    # ------------------------------------------------------------------
    # Hooks for subclasses
    # ------------------------------------------------------------------
    @classmethod
    def _select_sql(cls) -> str:
        return f"SELECT r.* FROM {cls.table} r"

    @classmethod
    def _row_to_read(cls, row: sqlite3.Row) -> BaseModel:
        return cls.read_model.model_validate(dict(row))

    @classmethod
    def _validate(
        cls,
        cursor: sqlite3.Cursor,
        owner_id: str,
        changes: Dict[str, Any],
        current: Optional[sqlite3.Row],
        today: date,
    ) -> None:
        """Check ``changes`` before they are written.

        ``current`` is ``None`` on create and the stored row on update.
        Raise a ``CarVaultError`` subclass to reject the write.
        """

    @classmethod
    def _defaults(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        return values

    @classmethod
    def _integrity_error(cls, exc: sqlite3.IntegrityError) -> Exception:
        return ConflictError(f"{cls.entity_name} conflicts with an existing record")

    @classmethod
    def _before_delete(cls, cursor: sqlite3.Cursor, owner_id: str, record_id: str) -> None:
        pass

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @classmethod
    def _fetch_owned(cls, cursor: sqlite3.Cursor, owner_id: str, record_id: str) -> Optional[sqlite3.Row]:
        return cursor.execute(
            f"{cls._select_sql()} WHERE r.id = ? AND r.owner_id = ?",
            (record_id, owner_id),
        ).fetchone()

    @classmethod
    def iter_for_owner(cls, owner_id: str, **filters: Any) -> Iterator[BaseModel]:
        """Yield the owner's records one by one in listing order.

        The generator holds a single cursor; it cannot be restarted,
        call it again to read the table afresh.  ``filters`` are extra
        ``column = value`` conditions (column names come from code, not
        from clients).
        """
        sql = f"{cls._select_sql()} WHERE r.owner_id = ?"
        params: List[Any] = [owner_id]
        for column, value in filters.items():
            sql += f" AND r.{column} = ?"
            params.append(value)
        sql += f" ORDER BY {cls.order_by}"
        conn = get_connection()
        try:
            for row in conn.execute(sql, params):
                yield cls._row_to_read(row)
        finally:
            conn.close()

    @classmethod
    async def list_for_owner(cls, owner_id: str) -> List[Any]:
        """Return all records of ``owner_id`` in listing order."""
        return list(cls.iter_for_owner(owner_id))

    @classmethod
    async def get_one(cls, owner_id: str, record_id: str) -> Any:
        """Return one record of ``owner_id`` or raise ``NotFoundError``."""
        conn = get_connection()
        try:
            row = cls._fetch_owned(conn.cursor(), owner_id, record_id)
        finally:
            conn.close()
        if row is None:
            raise NotFoundError(f"{cls.entity_name} not found")
        return cls._row_to_read(row)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    @classmethod
    async def create(cls, owner_id: str, data: BaseModel, today: Optional[date] = None) -> Any:
        """Validate and insert a new record owned by ``owner_id``.

        The owner always comes from the authenticated caller; schemas
        have no owner field.  Raises ``FieldValidationError``,
        ``NotFoundError`` (unknown car) or ``ConflictError``.
        """
        today = today or get_today()
        values = cls._defaults(data.model_dump())
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._validate(cursor, owner_id, values, None, today)
            record_id = uuid.uuid4().hex
            now = to_utc_iso(utc_now())
            columns = {"id": record_id, "owner_id": owner_id, **to_columns(values),
                       "created_at": now, "updated_at": now}
            placeholders = ", ".join("?" for _ in columns)
            cursor.execute(
                f"INSERT INTO {cls.table} ({', '.join(columns)}) VALUES ({placeholders})",
                tuple(columns.values()),
            )
            conn.commit()
            row = cls._fetch_owned(cursor, owner_id, record_id)
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise cls._integrity_error(exc) from exc
        finally:
            conn.close()
        logger.info("User %s created %s %s", owner_id, cls.entity_name.lower(), record_id)
        return cls._row_to_read(row)

    @classmethod
    async def update(cls, owner_id: str, record_id: str, data: BaseModel, today: Optional[date] = None) -> Any:
        """Apply a partial update to one of the owner's records.

        Only fields present in the request are written; ``owner_id`` is
        never among them.  The same checks as on create run against the
        changed fields.
        """
        today = today or get_today()
        changes = data.model_dump(exclude_unset=True)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            current = cls._fetch_owned(cursor, owner_id, record_id)
            if current is None:
                raise NotFoundError(f"{cls.entity_name} not found")
            if changes:
                cls._validate(cursor, owner_id, changes, current, today)
                columns = to_columns(changes)
                assignments = ", ".join(f"{column} = ?" for column in columns)
                cursor.execute(
                    f"UPDATE {cls.table} SET {assignments}, updated_at = ? WHERE id = ? AND owner_id = ?",
                    (*columns.values(), to_utc_iso(utc_now()), record_id, owner_id),
                )
                conn.commit()
                current = cls._fetch_owned(cursor, owner_id, record_id)
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise cls._integrity_error(exc) from exc
        finally:
            conn.close()
        if changes:
            logger.info(
                "User %s updated %s %s (%s)",
                owner_id, cls.entity_name.lower(), record_id, ", ".join(sorted(changes)),
            )
        return cls._row_to_read(current)

    @classmethod
    async def delete(cls, owner_id: str, record_id: str) -> None:
        """Delete one of the owner's records or raise ``NotFoundError``."""
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if cls._fetch_owned(cursor, owner_id, record_id) is None:
                raise NotFoundError(f"{cls.entity_name} not found")
            cls._before_delete(cursor, owner_id, record_id)
            cursor.execute(
                f"DELETE FROM {cls.table} WHERE id = ? AND owner_id = ?",
                (record_id, owner_id),
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        logger.info("User %s deleted %s %s", owner_id, cls.entity_name.lower(), record_id)


class CarLinkedRepository(OwnedRepository):
    """Records attached to a car: maintenance and expenses.

    Listings are ordered by event date, newest first.  Responses embed
    the linked car, joined on both id and owner so a record can never
    display another user's car.
    """

    order_by = "r.date DESC, r.created_at DESC, r.rowid DESC"

    @classmethod
    def _select_sql(cls) -> str:
        return (
            "SELECT r.*, c.make AS car_make, c.model AS car_model, c.year AS car_year, "
            "c.license_plate AS car_license_plate "
            f"FROM {cls.table} r "
            "LEFT JOIN cars c ON c.id = r.car_id AND c.owner_id = r.owner_id"
        )

    @classmethod
    def _row_to_read(cls, row: sqlite3.Row) -> BaseModel:
        data = dict(row)
        car_fields = {
            "make": data.pop("car_make"),
            "model": data.pop("car_model"),
            "year": data.pop("car_year"),
            "license_plate": data.pop("car_license_plate"),
        }
        # A dangling car_id (car deleted under the orphan policy) joins to NULLs.
        if car_fields["make"] is not None:
            data["car"] = CarBrief(id=data["car_id"], **car_fields)
        return cls.read_model.model_validate(data)

    @classmethod
    def _defaults(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        if values.get("date") is None:
            values["date"] = utc_now()
        return values

    @classmethod
    def _validate(cls, cursor, owner_id, changes, current, today) -> None:
        if "car_id" in changes:
            require_owned_car(cursor, owner_id, changes["car_id"])

    @classmethod
    async def list_for_car(cls, owner_id: str, car_id: str) -> List[Any]:
        """Return the owner's records for ``car_id``.

        The car itself must belong to ``owner_id``; otherwise
        ``NotFoundError`` is raised, also when the car has been deleted.
        """
        conn = get_connection()
        try:
            require_owned_car(conn.cursor(), owner_id, car_id)
        finally:
            conn.close()
        return list(cls.iter_for_owner(owner_id, car_id=car_id))
