"""Request/response schemas for idea endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ecoideias.ideas.constants import IdeaCategory, IdeaStatus


class IdeaCreateRequest(BaseModel):
    """Submit a new idea."""

    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10, max_length=5000)
    category: IdeaCategory
    impact: str | None = Field(None, max_length=1000)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Field cannot be blank"
            raise ValueError(msg)
        return v


class IdeaResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: str
    category: str
    category_label: str
    impact: str | None = None
    status: str
    points_awarded: int
    feedback: str | None = None
    evaluated_by: str | None = None
    evaluated_at: datetime | None = None
    approved_at: datetime | None = None
    implemented_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None
    author_name: str | None = None
    author_email: str | None = None


class IdeaListResponse(BaseModel):
    ideas: list[IdeaResponse]
    total: int
    page: int
    per_page: int


class EvaluateIdeaRequest(BaseModel):
    """Admin evaluation: new status, optional approval points and feedback."""

    status: IdeaStatus
    points: int | None = Field(None, ge=0, le=10000)
    feedback: str | None = Field(None, max_length=2000)


class EvaluateIdeaResponse(BaseModel):
    idea: IdeaResponse
    previous_status: str
    status_changed: bool
    points_granted: int
    notification_sent: bool
