"""
Business logic for maintenance records.

All of the owner scoping and car reference checks live in
``CarLinkedRepository``; this module only binds them to the
``maintenance`` table and its response schema.
"""

from ..schemas.maintenance import MaintenanceRead
from .repository import CarLinkedRepository


class MaintenanceService(CarLinkedRepository):
    """Service for a user's maintenance history."""

    table = "maintenance"
    entity_name = "Maintenance record"
    read_model = MaintenanceRead
