"""
Pydantic models for user data.

Defines schemas for registering users, logging in and reading user
information.  Password hashes never leave the service layer.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from ..services.validation import require_text
from .common import API_MODEL_CONFIG


MIN_PASSWORD_LENGTH = 6


class UserCreate(BaseModel):
    """Schema for registering a user."""

    name: str = Field(..., examples=["Jane Driver"])
    email: EmailStr = Field(..., examples=["jane@carvault.io"])
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, examples=["s3cret!"])

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return require_text(v, "Name")

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        # E‑mails are unique case‑insensitively.
        return v.lower()


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class UserRead(BaseModel):
    """Schema for reading a user from the API."""

    id: str
    name: str
    email: str
    created_at: datetime

    model_config = API_MODEL_CONFIG


class RegisterResponse(BaseModel):
    user: UserRead
    token: str

    model_config = API_MODEL_CONFIG


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead

    model_config = API_MODEL_CONFIG
