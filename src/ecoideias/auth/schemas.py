"""Request/response schemas for authentication and account endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


def _normalize_email(v: str) -> str:
    return v.lower().strip()


# ---------------------------------------------------------------------------
# Login / session
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Login with email + password."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return _normalize_email(v)


class UserResponse(BaseModel):
    """Account as seen by the frontend: identity, profile name and role flag."""

    id: str
    name: str
    email: str
    role: str
    is_admin: bool
    is_active: bool
    created_at: datetime | None = None
    last_login: datetime | None = None


class TokenResponse(BaseModel):
    """Access token + the account it belongs to."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


# ---------------------------------------------------------------------------
# Password flows
# ---------------------------------------------------------------------------


class ForgotPasswordRequest(BaseModel):
    """Request a password reset email."""

    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return _normalize_email(v)


class ResetPasswordRequest(BaseModel):
    """Reset password with a token from the reset email."""

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=128)


class ChangePasswordRequest(BaseModel):
    """Change password while logged in."""

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)


class StatusResponse(BaseModel):
    """Generic acknowledgement."""

    status: str
