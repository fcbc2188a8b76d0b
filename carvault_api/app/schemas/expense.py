"""
Pydantic models for expenses.

Expenses mirror maintenance records with a ``category`` instead of a
``type`` and an ``amount`` instead of a ``cost``; ``mileage`` is
optional.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from ..services.validation import MAX_AMOUNT, MAX_MILEAGE, optional_text, require_text
from .common import API_MODEL_CONFIG, CarBrief


class ExpenseCategory(str, Enum):
    FUEL = "Fuel"
    INSURANCE = "Insurance"
    REGISTRATION = "Registration"
    REPAIRS = "Repairs"
    PARTS = "Parts"
    TIRES = "Tires"
    OTHER = "Other"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class ExpenseBase(BaseModel):
    car_id: str = Field(..., examples=["5f0c3b2e9d4a4f6b8c1d2e3f4a5b6c7d"])
    category: ExpenseCategory = Field(..., examples=["Fuel"])
    description: str = Field(..., examples=["Full tank"])
    date: Optional[datetime] = Field(None, description="Defaults to the time of creation")
    amount: float = Field(..., ge=0, le=MAX_AMOUNT, allow_inf_nan=False, examples=[54.3])
    mileage: Optional[int] = Field(None, ge=0, le=MAX_MILEAGE)
    location: Optional[str] = None
    receipt: Optional[str] = Field(None, description="URL of a scanned receipt")
    notes: Optional[str] = None

    model_config = API_MODEL_CONFIG


class ExpenseCreate(ExpenseBase):
    """Schema for logging an expense."""

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


class ExpenseUpdate(BaseModel):
    """Schema for updating an expense; only supplied fields change."""

    car_id: Optional[str] = None
    category: Optional[ExpenseCategory] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    amount: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    mileage: Optional[int] = Field(None, ge=0, le=MAX_MILEAGE)
    location: Optional[str] = None
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

    @field_validator("category", "date", "amount")
    @classmethod
    def required_not_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name.capitalize()} cannot be null")
        return v

    @field_validator("location", "receipt", "notes")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)


class ExpenseRead(BaseModel):
    """Schema for reading an expense from the API."""

    id: str
    car_id: str
    owner_id: str
    car: Optional[CarBrief] = None
    category: ExpenseCategory
    description: str
    date: datetime
    amount: float
    mileage: Optional[int] = None
    location: Optional[str] = None
    receipt: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = API_MODEL_CONFIG
