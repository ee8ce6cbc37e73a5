"""Dashboard response schemas."""

from __future__ import annotations

from pydantic import BaseModel


class UserDashboardResponse(BaseModel):
    ideas_total: int
    ideas_by_status: dict[str, int]
    total_points: int
    ideas_implemented: int
    ranking_position: int | None = None


class AdminDashboardResponse(BaseModel):
    ideas_total: int
    ideas_by_status: dict[str, int]
    ideas_by_category: dict[str, int]
    approval_rate: float
    users_total: int
    users_active: int
    points_awarded_total: int
