"""
Expense endpoints for API v1.

Besides CRUD this router exposes ``/summary/categories``, the caller's
expense totals per category.  Literal paths are declared before
``/{expense_id}``.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from carvault_api.app.core.security import get_current_user
from carvault_api.app.schemas.common import MessageResponse
from carvault_api.app.schemas.expense import ExpenseCreate, ExpenseRead, ExpenseUpdate
from carvault_api.app.schemas.statistics import CategorySummary
from carvault_api.app.services.expense_service import ExpenseService
from carvault_api.app.services.statistics_service import StatisticsService


router = APIRouter()


@router.get("", response_model=List[ExpenseRead])
@router.get("/", response_model=List[ExpenseRead], include_in_schema=False)
async def list_expenses(current_user: dict = Depends(get_current_user)) -> List[ExpenseRead]:
    """List the caller's expenses, newest first."""
    return await ExpenseService.list_for_owner(current_user["user_id"])


@router.get("/summary/categories", response_model=List[CategorySummary])
async def expense_summary_by_category(current_user: dict = Depends(get_current_user)) -> List[CategorySummary]:
    """Total and count of the caller's expenses per category, largest total first."""
    return await StatisticsService.expense_categories(current_user["user_id"])


@router.get("/car/{car_id}", response_model=List[ExpenseRead])
async def list_expenses_for_car(car_id: str, current_user: dict = Depends(get_current_user)) -> List[ExpenseRead]:
    return await ExpenseService.list_for_car(current_user["user_id"], car_id)


@router.get("/{expense_id}", response_model=ExpenseRead)
async def get_expense(expense_id: str, current_user: dict = Depends(get_current_user)) -> ExpenseRead:
    return await ExpenseService.get_one(current_user["user_id"], expense_id)


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED,
             include_in_schema=False)
async def create_expense(expense: ExpenseCreate, current_user: dict = Depends(get_current_user)) -> ExpenseRead:
    """Log an expense against one of the caller's cars (404 if the car is not theirs)."""
    return await ExpenseService.create(current_user["user_id"], expense)


@router.put("/{expense_id}", response_model=ExpenseRead)
async def update_expense(
    expense_id: str,
    updates: ExpenseUpdate,
    current_user: dict = Depends(get_current_user),
) -> ExpenseRead:
    return await ExpenseService.update(current_user["user_id"], expense_id, updates)


@router.delete("/{expense_id}", response_model=MessageResponse)
async def delete_expense(expense_id: str, current_user: dict = Depends(get_current_user)) -> MessageResponse:
    await ExpenseService.delete(current_user["user_id"], expense_id)
    return MessageResponse(message="Expense deleted successfully")
