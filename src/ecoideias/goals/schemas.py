"""Goal schemas."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from ecoideias.ideas.constants import IdeaCategory


class GoalCreateRequest(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str | None = Field(None, max_length=2000)
    category: IdeaCategory | None = None
    target_count: int = Field(..., ge=1, le=100000)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_period(self) -> GoalCreateRequest:
        if self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        return self


class GoalUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged. Only description and category can be cleared."""

    title: str | None = Field(None, min_length=3, max_length=200)
    description: str | None = Field(None, max_length=2000)
    category: IdeaCategory | None = None
    target_count: int | None = Field(None, ge=1, le=100000)
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("title", "target_count", "start_date", "end_date")
    @classmethod
    def reject_null(cls, v: object) -> object:
        if v is None:
            msg = "Field cannot be null"
            raise ValueError(msg)
        return v


class GoalResponse(BaseModel):
    id: str
    title: str
    description: str | None = None
    category: str | None = None
    target_count: int
    start_date: date
    end_date: date
    progress: int
    percent: int
    created_at: datetime | None = None
