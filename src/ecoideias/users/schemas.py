"""Request/response schemas for account endpoints."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field, field_validator

from ecoideias.auth.roles import ROLE_USER
from ecoideias.auth.schemas import UserResponse


class ProfileUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Name cannot be blank"
            raise ValueError(msg)
        return v


class AdminUserResponse(UserResponse):
    """Account row of the user-management table."""

    total_points: int = 0
    ideas_submitted: int = 0
    ideas_approved: int = 0
    ideas_implemented: int = 0


class AdminUserListResponse(BaseModel):
    users: list[AdminUserResponse]
    total: int


class AdminUserCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    role: str = Field(ROLE_USER, pattern="^(admin|user)$")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class AdminUserUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=120)
    email: EmailStr | None = None
    role: str | None = Field(None, pattern="^(admin|user)$")
    is_active: bool | None = None
    password: str | None = Field(None, min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.lower().strip() if v else v
