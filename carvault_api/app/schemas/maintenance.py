"""
Pydantic models for maintenance records.

A maintenance record belongs to one car and, through it, to one user.
``car_id`` is supplied by the client; the owning user never is.
Responses embed a brief description of the car (``car``), which is
``null`` when the car has since been deleted.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from ..services.validation import MAX_AMOUNT, MAX_MILEAGE, optional_text, require_text
from .common import API_MODEL_CONFIG, CarBrief


class MaintenanceType(str, Enum):
    OIL_CHANGE = "Oil Change"
    TIRE_ROTATION = "Tire Rotation"
    BRAKE_SERVICE = "Brake Service"
    ENGINE_SERVICE = "Engine Service"
    TRANSMISSION = "Transmission"
    OTHER = "Other"

    @classmethod
    def _missing_(cls, value):
        # Accept the compact spelling ("OilChange", "oil change").
        if isinstance(value, str):
            compact = value.replace(" ", "").lower()
            for member in cls:
                if member.value.replace(" ", "").lower() == compact:
                    return member
        return None


class MaintenanceBase(BaseModel):
    car_id: str = Field(..., examples=["5f0c3b2e9d4a4f6b8c1d2e3f4a5b6c7d"])
    type: MaintenanceType = Field(..., examples=["Oil Change"])
    description: str = Field(..., examples=["Synthetic 5W-30, new filter"])
    date: Optional[datetime] = Field(None, description="Defaults to the time of creation")
    mileage: int = Field(..., ge=0, le=MAX_MILEAGE, examples=[42000])
    cost: float = Field(..., ge=0, le=MAX_AMOUNT, allow_inf_nan=False, examples=[79.99])
    location: Optional[str] = Field(None, examples=["Quick Lube, Main St."])
    next_service_date: Optional[datetime] = None
    next_service_mileage: Optional[int] = Field(None, ge=0, le=MAX_MILEAGE)
    receipt: Optional[str] = Field(None, description="URL of a scanned receipt")
    notes: Optional[str] = None

    model_config = API_MODEL_CONFIG


class MaintenanceCreate(MaintenanceBase):
    """Schema for logging a maintenance event."""

    @field_validator("car_id")
    @classmethod
    def car_id_not_blank(cls, v: str) -> str:
        return require_text(v, "Car ID")

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        return require_text(v, "Description")

    @field_validator("location", "receipt", "notes")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)


class MaintenanceUpdate(BaseModel):
    """Schema for updating a maintenance record.

    Only fields present in the request body are changed.  Supplying
    ``carId`` moves the record to another of the caller's cars.
    """

    car_id: Optional[str] = None
    type: Optional[MaintenanceType] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    mileage: Optional[int] = Field(None, ge=0, le=MAX_MILEAGE)
    cost: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    location: Optional[str] = None
    next_service_date: Optional[datetime] = None
    next_service_mileage: Optional[int] = Field(None, ge=0, le=MAX_MILEAGE)
    receipt: Optional[str] = None
    notes: Optional[str] = None

    model_config = API_MODEL_CONFIG

    @field_validator("car_id", "description")
    @classmethod
    def text_not_blank(cls, v: Optional[str], info: ValidationInfo) -> str:
        label = "Car ID" if info.field_name == "car_id" else "Description"
        if v is None:
            raise ValueError(f"{label} cannot be empty")
        return require_text(v, label)

    @field_validator("type", "date", "mileage", "cost")
    @classmethod
    def required_not_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name.capitalize()} cannot be null")
        return v

    @field_validator("location", "receipt", "notes")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)


class MaintenanceRead(BaseModel):
    """Schema for reading a maintenance record from the API."""

    id: str
    car_id: str
    owner_id: str
    car: Optional[CarBrief] = None
    type: MaintenanceType
    description: str
    date: datetime
    mileage: int
    cost: float
    location: Optional[str] = None
    next_service_date: Optional[datetime] = None
    next_service_mileage: Optional[int] = None
    receipt: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = API_MODEL_CONFIG
