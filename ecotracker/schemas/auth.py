"""Authentication schemas.

Pydantic schemas for user registration, login and the current-user view.
"""

import uuid

from pydantic import EmailStr, Field

from ecotracker.core.security import MIN_PASSWORD_LENGTH
from ecotracker.schemas.common import CamelModel, UtcDatetime


class UserRegistrationRequest(CamelModel):
    """Request schema for user registration."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        max_length=128,
        description=f"Password (min {MIN_PASSWORD_LENGTH} chars)",
    )
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)


class UserResponse(CamelModel):
    """Public user information response."""

    id: uuid.UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool
    created_at: UtcDatetime


class LoginRequest(CamelModel):
    """Request schema for user login."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class LoginResponse(CamelModel):
    """Response schema for successful login."""

    message: str = Field(default="Login successful")
    user: UserResponse


class LogoutResponse(CamelModel):
    message: str = Field(default="Logout successful")
