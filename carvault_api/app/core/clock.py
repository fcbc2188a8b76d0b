"""
Clock dependency.

Validation rules that depend on the current date (the car ``year``
upper bound) receive the date as an argument.  Endpoints obtain it
from ``get_today`` via ``Depends`` so tests can pin it with
``app.dependency_overrides``.
"""

from datetime import date, datetime, timezone


def get_today() -> date:
    """Return today's date in UTC."""
    return datetime.now(timezone.utc).date()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc_iso(value: datetime) -> str:
    """Serialise ``value`` as ISO‑8601 in UTC.

    Naive datetimes are taken to be UTC already.  Storing every
    timestamp in the same zone keeps text ordering in SQLite equal to
    chronological ordering.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
