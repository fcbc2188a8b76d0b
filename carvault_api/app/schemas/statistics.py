"""
Pydantic models for cost reports.

All figures are plain sums in whatever single currency the user
records; no conversion is performed.
"""

from typing import List

from pydantic import BaseModel

from .common import API_MODEL_CONFIG, CarBrief
from .expense import ExpenseCategory


class CategorySummary(BaseModel):
    category: ExpenseCategory
    total: float
    count: int

    model_config = API_MODEL_CONFIG


class CarTotals(BaseModel):
    """Totals of the records linked to one car id."""

    car_id: str
    total: float
    count: int

    model_config = API_MODEL_CONFIG


class CarCostSummary(BaseModel):
    """Maintenance and expense totals for a single car."""

    car: CarBrief
    maintenance_total: float
    maintenance_count: int
    expense_total: float
    expense_count: int
    total_spent: float

    model_config = API_MODEL_CONFIG


class Overview(BaseModel):
    """Dashboard figures across all of a user's cars."""

    car_count: int
    maintenance_count: int
    expense_count: int
    maintenance_total: float
    expense_total: float
    total_spent: float
    cars: List[CarCostSummary]

    model_config = API_MODEL_CONFIG
