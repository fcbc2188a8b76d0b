"""
Authentication endpoints for API v1.

Registration, login and the profile of the current user.  Login
returns a bearer token that every other endpoint requires.
"""

from fastapi import APIRouter, Depends, status

from carvault_api.app.core.exceptions import UnauthorizedError
from carvault_api.app.core.security import create_access_token, get_current_user
from carvault_api.app.schemas.user import (
    RegisterResponse,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserRead,
)
from carvault_api.app.services.user_service import UserService


router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate) -> RegisterResponse:
    """Register a new user and return it together with a session token.

    Fails with 400 (``EmailTaken``) if the e‑mail is already in use.
    """
    created = await UserService.register(user)
    token = create_access_token({"sub": created.id})
    return RegisterResponse(user=created, token=token)


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin) -> TokenResponse:
    """Exchange e‑mail and password for a bearer token."""
    user = await UserService.authenticate(credentials.email, credentials.password)
    if not user:
        raise UnauthorizedError("Invalid email or password")
    return TokenResponse(token=create_access_token({"sub": user.id}), user=user)


@router.get("/me", response_model=UserRead)
async def read_current_user(current_user: dict = Depends(get_current_user)) -> UserRead:
    return await UserService.get_user(current_user["user_id"])
