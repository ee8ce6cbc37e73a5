"""Platform settings schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PlatformSettingsResponse(BaseModel):
    points_per_submission: int
    points_per_approval: int
    points_per_implementation: int
    notify_status_changes: bool
    updated_at: datetime | None = None


class PlatformSettingsUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    points_per_submission: int | None = Field(None, ge=0, le=10000)
    points_per_approval: int | None = Field(None, ge=0, le=10000)
    points_per_implementation: int | None = Field(None, ge=0, le=10000)
    notify_status_changes: bool | None = None
