"""Ranking panel schemas."""

from __future__ import annotations

from pydantic import BaseModel


class RankingEntry(BaseModel):
    position: int
    user_id: str
    name: str
    email: str | None = None
    initials: str
    total_points: int
    ideas_submitted: int
    ideas_approved: int
    ideas_implemented: int
    rank_icon: str | None = None
    rank_label: str


class RankingResponse(BaseModel):
    entries: list[RankingEntry]
