"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


class SignupRequest(BaseModel):
    """Email signup request."""

    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(BaseModel):
    """Login with email + password."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class UserResponse(BaseModel):
    """Public user fields."""

    id: int
    email: str
    username: str
    name: str
    created_at: datetime | None = None


class StreakResponse(BaseModel):
    streak: int
    best_streak: int


class TokenResponse(BaseModel):
    """Token returned after signup."""

    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class LoginResponse(TokenResponse):
    """Token returned after login, with the refreshed streak."""

    streak: StreakResponse
