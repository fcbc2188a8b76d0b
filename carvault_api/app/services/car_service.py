"""
Business logic for cars.

Cars are owned by exactly one user and identified across the whole
system by their license plate: two cars may never share a plate, even
when they belong to different users.  The pre‑insert lookup gives a
friendly error in the common case; the ``UNIQUE`` constraint on
``cars.license_plate`` settles concurrent creations.
"""

import logging
import sqlite3
from datetime import date
from typing import Any, Dict, Optional

from ..core.config import settings
from ..core.exceptions import ConflictError
from ..schemas.car import CarDeletePolicy, CarRead
from .repository import OwnedRepository
from .validation import check_year


logger = logging.getLogger(__name__)

DUPLICATE_PLATE_MESSAGE = "A car with this license plate already exists"


class CarService(OwnedRepository):
    """Service for the cars a user owns."""

    table = "cars"
    entity_name = "Car"
    read_model = CarRead

    @classmethod
    def _validate(
        cls,
        cursor: sqlite3.Cursor,
        owner_id: str,
        changes: Dict[str, Any],
        current: Optional[sqlite3.Row],
        today: date,
    ) -> None:
        if "year" in changes:
            check_year(changes["year"], today)
        plate = changes.get("license_plate")
        if plate is None:
            return
        if current is not None and plate == current["license_plate"]:
            return
        # Uniqueness is global, so this lookup is deliberately not owner-scoped.
        exclude_id = current["id"] if current is not None else ""
        clash = cursor.execute(
            "SELECT id FROM cars WHERE license_plate = ? AND id != ?",
            (plate, exclude_id),
        ).fetchone()
        if clash:
            raise ConflictError(DUPLICATE_PLATE_MESSAGE)

    @classmethod
    def _integrity_error(cls, exc: sqlite3.IntegrityError) -> Exception:
        if "license_plate" in str(exc):
            logger.warning("License plate race caught by the unique index: %s", exc)
            return ConflictError(DUPLICATE_PLATE_MESSAGE)
        return super()._integrity_error(exc)

    @classmethod
    def _before_delete(cls, cursor: sqlite3.Cursor, owner_id: str, record_id: str) -> None:
        """Apply the configured policy to the car's maintenance and expenses."""
        policy = CarDeletePolicy.from_setting(settings.on_car_delete)
        if policy is CarDeletePolicy.ORPHAN:
            return
        if policy is CarDeletePolicy.BLOCK:
            dependents = 0
            for table in ("maintenance", "expenses"):
                dependents += cursor.execute(
                    f"SELECT COUNT(*) FROM {table} WHERE car_id = ? AND owner_id = ?",
                    (record_id, owner_id),
                ).fetchone()[0]
            if dependents:
                raise ConflictError(
                    f"Car has {dependents} maintenance or expense records; delete them first"
                )
            return
        for table in ("maintenance", "expenses"):
            cursor.execute(
                f"DELETE FROM {table} WHERE car_id = ? AND owner_id = ?",
                (record_id, owner_id),
            )
        logger.info("Cascaded delete of records for car %s", record_id)
