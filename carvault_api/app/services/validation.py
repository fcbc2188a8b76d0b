"""
Field rules shared by schemas and services.

These are plain functions with no I/O.  Schema validators call the
text helpers so malformed input is rejected at the boundary; services
call ``check_year`` with the date supplied by the ``get_today``
dependency because the upper bound moves with the calendar.
"""

from datetime import date
from typing import Optional

from ..core.exceptions import FieldValidationError


MIN_CAR_YEAR = 1900

# Upper bounds keep odometer readings inside SQLite INTEGER and keep any
# realistic number of summed amounts finite.
MAX_MILEAGE = 10_000_000
MAX_AMOUNT = 1_000_000_000


def require_text(value: str, label: str) -> str:
    """Strip ``value`` and reject it if nothing is left."""
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value


def optional_text(value: Optional[str]) -> Optional[str]:
    """Strip ``value``; blank strings become ``None``."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_plate(value: str) -> str:
    """License plates are compared and stored trimmed and upper‑cased."""
    return require_text(value, "License plate").upper()


def normalize_vin(value: Optional[str]) -> Optional[str]:
    value = optional_text(value)
    return value.upper() if value else None


def max_car_year(today: date) -> int:
    return today.year + 1


def check_year(year: int, today: date) -> int:
    """Validate a model year against ``[1900, today.year + 1]``.

    Raises ``FieldValidationError`` when the year is out of range.
    """
    upper = max_car_year(today)
    if not MIN_CAR_YEAR <= year <= upper:
        raise FieldValidationError(
            "Valid year is required",
            errors=[{
                "field": "year",
                "message": f"Year must be between {MIN_CAR_YEAR} and {upper}",
            }],
        )
    return year
