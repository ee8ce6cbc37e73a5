"""Activity feed schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ActivityItem(BaseModel):
    """One rendered entry of the activity panel."""

    id: str
    user_id: str
    user_name: str
    action_type: str
    entity_type: str
    entity_id: str
    title: str
    text: str
    icon: str
    metadata: dict[str, Any] = {}
    created_at: datetime


class ActivityFeedResponse(BaseModel):
    items: list[ActivityItem]
