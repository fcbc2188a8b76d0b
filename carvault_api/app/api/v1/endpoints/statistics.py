"""
Statistics endpoints for API v1.
"""

from fastapi import APIRouter, Depends

from carvault_api.app.core.security import get_current_user
from carvault_api.app.schemas.statistics import Overview
from carvault_api.app.services.statistics_service import StatisticsService


router = APIRouter()


@router.get("/overview", response_model=Overview)
async def overview(current_user: dict = Depends(get_current_user)) -> Overview:
    """Dashboard totals across all of the caller's cars."""
    return await StatisticsService.overview(current_user["user_id"])
