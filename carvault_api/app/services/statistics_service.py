"""
Service layer for cost reporting.

The module level functions are pure: they take records that were
already fetched and return sums and groupings, so they can be tested
without a database.  ``StatisticsService`` fetches a user's records
once per report and feeds them to those functions.  Nothing is cached;
every report is computed on demand.
"""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from ..schemas.common import CarBrief
from ..schemas.expense import ExpenseRead
from ..schemas.statistics import CarCostSummary, CarTotals, CategorySummary, Overview
from .car_service import CarService
from .expense_service import ExpenseService
from .maintenance_service import MaintenanceService


def record_amount(record) -> float:
    """The money value of a maintenance record (``cost``) or expense (``amount``)."""
    if hasattr(record, "cost"):
        return record.cost
    return record.amount


def total_cost(records: Iterable) -> float:
    """Sum the cost/amount of ``records``; an empty input sums to 0.

    ``math.fsum`` makes the result independent of record order.
    """
    return math.fsum(record_amount(record) for record in records)


def summary_by_category(expenses: Iterable[ExpenseRead]) -> List[CategorySummary]:
    """Group expenses by category, largest total first."""
    grouped: Dict[str, List[float]] = defaultdict(list)
    for expense in expenses:
        grouped[expense.category].append(expense.amount)
    summaries = [
        CategorySummary(category=category, total=math.fsum(amounts), count=len(amounts))
        for category, amounts in grouped.items()
    ]
    summaries.sort(key=lambda s: (-s.total, s.category.value))
    return summaries


def summary_by_car(records: Iterable) -> List[CarTotals]:
    """Group maintenance records or expenses by ``car_id``, largest total first."""
    grouped: Dict[str, List[float]] = defaultdict(list)
    for record in records:
        grouped[record.car_id].append(record_amount(record))
    totals = [
        CarTotals(car_id=car_id, total=math.fsum(amounts), count=len(amounts))
        for car_id, amounts in grouped.items()
    ]
    totals.sort(key=lambda t: (-t.total, t.car_id))
    return totals


def car_cost_summary(car: CarBrief, maintenance: Sequence, expenses: Sequence) -> CarCostSummary:
    maintenance_total = total_cost(maintenance)
    expense_total = total_cost(expenses)
    return CarCostSummary(
        car=car,
        maintenance_total=maintenance_total,
        maintenance_count=len(maintenance),
        expense_total=expense_total,
        expense_count=len(expenses),
        total_spent=maintenance_total + expense_total,
    )


class StatisticsService:
    """Reports over a single user's maintenance and expenses."""

    @classmethod
    async def expense_categories(cls, owner_id: str) -> List[CategorySummary]:
        """Return the owner's expense totals per category."""
        return summary_by_category(ExpenseService.iter_for_owner(owner_id))

    @classmethod
    async def car_summary(cls, owner_id: str, car_id: str) -> CarCostSummary:
        """Return maintenance and expense totals for one of the owner's cars.

        Raises ``NotFoundError`` if the car is missing or not owned.
        """
        car = await CarService.get_one(owner_id, car_id)
        maintenance = await MaintenanceService.list_for_car(owner_id, car_id)
        expenses = await ExpenseService.list_for_car(owner_id, car_id)
        return car_cost_summary(_brief(car), maintenance, expenses)

    @classmethod
    async def overview(cls, owner_id: str) -> Overview:
        """Return dashboard totals and a per‑car breakdown.

        Records whose car was deleted count towards the totals but do
        not appear in the breakdown.
        """
        cars = await CarService.list_for_owner(owner_id)
        maintenance = await MaintenanceService.list_for_owner(owner_id)
        expenses = await ExpenseService.list_for_owner(owner_id)

        maintenance_by_car: Dict[str, list] = defaultdict(list)
        for record in maintenance:
            maintenance_by_car[record.car_id].append(record)
        expenses_by_car: Dict[str, list] = defaultdict(list)
        for record in expenses:
            expenses_by_car[record.car_id].append(record)

        per_car = [
            car_cost_summary(_brief(car), maintenance_by_car[car.id], expenses_by_car[car.id])
            for car in cars
        ]
        maintenance_total = total_cost(maintenance)
        expense_total = total_cost(expenses)
        return Overview(
            car_count=len(cars),
            maintenance_count=len(maintenance),
            expense_count=len(expenses),
            maintenance_total=maintenance_total,
            expense_total=expense_total,
            total_spent=maintenance_total + expense_total,
            cars=per_car,
        )


def _brief(car) -> CarBrief:
    return CarBrief(id=car.id, make=car.make, model=car.model, year=car.year, license_plate=car.license_plate)
