"""
Top‑level router for version 1 of the API.

This router aggregates the domain routers under their prefixes.  When
new domains are introduced, update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import auth, cars, expenses, maintenance, statistics

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(cars.router, prefix="/cars", tags=["cars"])
router.include_router(maintenance.router, prefix="/maintenance", tags=["maintenance"])
router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
router.include_router(statistics.router, prefix="/statistics", tags=["statistics"])
