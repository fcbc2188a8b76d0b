"""
Maintenance endpoints for API v1.

Routes mirror the expense endpoints.  ``/car/{car_id}`` is declared
before ``/{record_id}`` so the literal segment is matched first.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from carvault_api.app.core.security import get_current_user
from carvault_api.app.schemas.common import MessageResponse
from carvault_api.app.schemas.maintenance import (
    MaintenanceCreate,
    MaintenanceRead,
    MaintenanceUpdate,
)
from carvault_api.app.services.maintenance_service import MaintenanceService


router = APIRouter()


@router.get("", response_model=List[MaintenanceRead])
@router.get("/", response_model=List[MaintenanceRead], include_in_schema=False)
async def list_maintenance(current_user: dict = Depends(get_current_user)) -> List[MaintenanceRead]:
    """List the caller's maintenance records, newest first."""
    return await MaintenanceService.list_for_owner(current_user["user_id"])


@router.get("/car/{car_id}", response_model=List[MaintenanceRead])
async def list_maintenance_for_car(
    car_id: str,
    current_user: dict = Depends(get_current_user),
) -> List[MaintenanceRead]:
    """List the maintenance history of one car (404 if the car is not the caller's)."""
    return await MaintenanceService.list_for_car(current_user["user_id"], car_id)


@router.get("/{record_id}", response_model=MaintenanceRead)
async def get_maintenance(record_id: str, current_user: dict = Depends(get_current_user)) -> MaintenanceRead:
    return await MaintenanceService.get_one(current_user["user_id"], record_id)


@router.post("", response_model=MaintenanceRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=MaintenanceRead, status_code=status.HTTP_201_CREATED,
             include_in_schema=False)
async def create_maintenance(
    record: MaintenanceCreate,
    current_user: dict = Depends(get_current_user),
) -> MaintenanceRead:
    """Log a maintenance event against one of the caller's cars.

    Returns 404 if ``carId`` does not name a car owned by the caller.
    """
    return await MaintenanceService.create(current_user["user_id"], record)


@router.put("/{record_id}", response_model=MaintenanceRead)
async def update_maintenance(
    record_id: str,
    updates: MaintenanceUpdate,
    current_user: dict = Depends(get_current_user),
) -> MaintenanceRead:
    return await MaintenanceService.update(current_user["user_id"], record_id, updates)


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_maintenance(record_id: str, current_user: dict = Depends(get_current_user)) -> MessageResponse:
    await MaintenanceService.delete(current_user["user_id"], record_id)
    return MessageResponse(message="Maintenance record deleted successfully")
