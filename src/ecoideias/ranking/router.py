"""Ranking endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.dependencies import get_current_user
from ecoideias.config import get_settings
from ecoideias.database import get_session
from ecoideias.db.models import User
from ecoideias.ranking.schemas import RankingResponse
from ecoideias.ranking.service import get_ranking

router = APIRouter(prefix="/api/v1/ranking", tags=["Ranking"])


@router.get("", response_model=RankingResponse)
async def ranking(
    limit: int | None = Query(None, ge=1, le=100),
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> RankingResponse:
    """Top users by points; ``limit`` defaults to ECO_RANKING_DEFAULT_LIMIT."""
    limit = limit or get_settings().ranking_default_limit
    return RankingResponse(entries=await get_ranking(db, limit))
