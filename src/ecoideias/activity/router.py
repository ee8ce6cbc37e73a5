"""Activity feed endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.activity.schemas import ActivityFeedResponse
from ecoideias.activity.service import get_recent_activities
from ecoideias.auth.dependencies import get_current_user
from ecoideias.config import get_settings
from ecoideias.database import get_session
from ecoideias.db.models import User

router = APIRouter(prefix="/api/v1/activities", tags=["Activity"])


@router.get("", response_model=ActivityFeedResponse)
async def list_activities(
    limit: int | None = Query(None, ge=1, le=100),
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ActivityFeedResponse:
    """Latest platform activities, newest first. Defaults to the realtime feed size."""
    limit = limit or get_settings().activity_feed_limit
    return ActivityFeedResponse(items=await get_recent_activities(db, limit))
