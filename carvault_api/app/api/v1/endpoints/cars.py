"""
Car endpoints for API v1.

Every route is scoped to the authenticated user: cars of other users
are reported as not found.
"""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, status

from carvault_api.app.core.clock import get_today
from carvault_api.app.core.security import get_current_user
from carvault_api.app.schemas.car import CarCreate, CarRead, CarUpdate
from carvault_api.app.schemas.common import MessageResponse
from carvault_api.app.schemas.statistics import CarCostSummary
from carvault_api.app.services.car_service import CarService
from carvault_api.app.services.statistics_service import StatisticsService


router = APIRouter()


@router.get("", response_model=List[CarRead])
@router.get("/", response_model=List[CarRead], include_in_schema=False)
async def list_cars(current_user: dict = Depends(get_current_user)) -> List[CarRead]:
    """List the caller's cars, most recently added first."""
    return await CarService.list_for_owner(current_user["user_id"])


@router.post("", response_model=CarRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=CarRead, status_code=status.HTTP_201_CREATED,
             include_in_schema=False)
async def create_car(
    car: CarCreate,
    current_user: dict = Depends(get_current_user),
    today: date = Depends(get_today),
) -> CarRead:
    """Add a car.

    The license plate is stored upper‑cased and must not be used by any
    other car in the system (400 ``Conflict``).  ``year`` must lie
    between 1900 and next year.
    """
    return await CarService.create(current_user["user_id"], car, today=today)


@router.get("/{car_id}", response_model=CarRead)
async def get_car(car_id: str, current_user: dict = Depends(get_current_user)) -> CarRead:
    return await CarService.get_one(current_user["user_id"], car_id)


@router.put("/{car_id}", response_model=CarRead)
async def update_car(
    car_id: str,
    updates: CarUpdate,
    current_user: dict = Depends(get_current_user),
    today: date = Depends(get_today),
) -> CarRead:
    """Update a car.

    Partial updates are supported; any unspecified fields remain
    unchanged.  A changed plate is re‑checked for uniqueness.
    """
    return await CarService.update(current_user["user_id"], car_id, updates, today=today)


@router.delete("/{car_id}", response_model=MessageResponse)
async def delete_car(car_id: str, current_user: dict = Depends(get_current_user)) -> MessageResponse:
    """Delete a car.

    Its maintenance and expense records are kept, deleted or protect
    the car from deletion depending on the ``ON_CAR_DELETE`` setting.
    """
    await CarService.delete(current_user["user_id"], car_id)
    return MessageResponse(message="Car deleted successfully")


@router.get("/{car_id}/summary", response_model=CarCostSummary)
async def car_summary(car_id: str, current_user: dict = Depends(get_current_user)) -> CarCostSummary:
    """Maintenance and expense totals for one car."""
    return await StatisticsService.car_summary(current_user["user_id"], car_id)
