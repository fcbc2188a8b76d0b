"""
Pydantic models for car data.

``CarCreate`` and ``CarUpdate`` normalise their input (trimmed text,
upper‑cased plate and VIN) so services only ever see canonical values.
The ``year`` upper bound depends on the current date and is checked
by ``CarService`` with an injected clock rather than here.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from ..services.validation import (
    MAX_MILEAGE,
    MIN_CAR_YEAR,
    normalize_plate,
    normalize_vin,
    optional_text,
    require_text,
)
from .common import API_MODEL_CONFIG


class CarDeletePolicy(str, Enum):
    """What to do with a car's maintenance and expense records on delete."""

    CASCADE = "cascade"
    ORPHAN = "orphan"
    BLOCK = "block"

    @classmethod
    def from_setting(cls, value: str) -> "CarDeletePolicy":
        """Parse the ``ON_CAR_DELETE`` setting (case and surrounding blanks ignored)."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(f"ON_CAR_DELETE must be one of {choices}; got {value!r}") from None


class CarBase(BaseModel):
    make: str = Field(..., examples=["Toyota"])
    model: str = Field(..., examples=["Camry"])
    year: int = Field(..., ge=MIN_CAR_YEAR, examples=[2022])
    color: str = Field(..., examples=["Blue"])
    license_plate: str = Field(..., examples=["ABC123"])
    vin: Optional[str] = Field(None, examples=["4T1BF1FK5CU123456"])
    mileage: int = Field(0, ge=0, le=MAX_MILEAGE, examples=[15000])
    image: Optional[str] = Field(None, description="URL of a photo of the car")
    notes: Optional[str] = None

    model_config = API_MODEL_CONFIG


class CarCreate(CarBase):
    """Schema for creating a car."""

    @field_validator("make", "model", "color")
    @classmethod
    def text_not_blank(cls, v: str, info: ValidationInfo) -> str:
        return require_text(v, info.field_name.capitalize())

    @field_validator("license_plate")
    @classmethod
    def canonical_plate(cls, v: str) -> str:
        return normalize_plate(v)

    @field_validator("vin")
    @classmethod
    def canonical_vin(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vin(v)

    @field_validator("image", "notes")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)


class CarUpdate(BaseModel):
    """Schema for updating a car.

    All fields are optional; only fields present in the request body
    are changed.  Required attributes may be omitted but not set to
    ``null``.
    """

    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(None, ge=MIN_CAR_YEAR)
    color: Optional[str] = None
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    mileage: Optional[int] = Field(None, ge=0, le=MAX_MILEAGE)
    image: Optional[str] = None
    notes: Optional[str] = None

    model_config = API_MODEL_CONFIG

    @field_validator("make", "model", "color")
    @classmethod
    def text_not_blank(cls, v: Optional[str], info: ValidationInfo) -> str:
        label = info.field_name.capitalize()
        if v is None:
            raise ValueError(f"{label} cannot be empty")
        return require_text(v, label)

    @field_validator("year", "mileage")
    @classmethod
    def number_not_null(cls, v: Optional[int], info: ValidationInfo) -> int:
        if v is None:
            raise ValueError(f"{info.field_name.capitalize()} cannot be null")
        return v

    @field_validator("license_plate")
    @classmethod
    def canonical_plate(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("License plate cannot be empty")
        return normalize_plate(v)

    @field_validator("vin")
    @classmethod
    def canonical_vin(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vin(v)

    @field_validator("image", "notes")
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v)


class CarRead(CarBase):
    """Schema for reading a car from the API."""

    id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime
