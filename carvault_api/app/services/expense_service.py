"""
Business logic for expenses.

Expenses share the owner scoping and car reference rules of
maintenance records (see ``CarLinkedRepository``).
"""

from ..schemas.expense import ExpenseRead
from .repository import CarLinkedRepository


class ExpenseService(CarLinkedRepository):
    """Service for a user's car expenses."""

    table = "expenses"
    entity_name = "Expense"
    read_model = ExpenseRead
