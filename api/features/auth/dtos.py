"""DTOs for the Auth feature."""
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from api.shared.dtos import BaseDTO


class RegisterRequest(BaseDTO):
    """Request to create an account."""

    name: str = Field(min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(max_length=255, description="Login email")
    password: str = Field(min_length=8, description="Plain-text password")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class LoginRequest(BaseDTO):
    """Request to exchange credentials for a bearer token."""

    email: EmailStr = Field(description="Login email")
    password: str = Field(min_length=1, description="Plain-text password")


class UserDTO(BaseDTO):
    """Public view of a user."""

    id: str = Field(description="User identifier")
    name: str = Field(description="Display name")
    email: str = Field(description="Login email")
    role: str = Field(description="Account role")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")


class TokenResponse(BaseDTO):
    """User plus a freshly issued bearer token."""

    user: UserDTO = Field(description="Authenticated user")
    access_token: str = Field(description="Bearer token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_at: datetime = Field(description="Token expiry")


class MeResponse(BaseDTO):
    user: UserDTO = Field(description="Authenticated user")
