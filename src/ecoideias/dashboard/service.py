"""Dashboard aggregation.

User dashboard: own idea counts, points and ranking position.
Admin dashboard: platform-wide counts, cached in Redis for a few seconds when
Redis is available.
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from redis.exceptions import RedisError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.db.models import Idea, User, UserPoints
from ecoideias.ideas.constants import CATEGORY_LABELS, IdeaStatus
from ecoideias.points.service import get_points
from ecoideias.ranking.service import get_user_position
from ecoideias.redis_client import get_redis, redis_available

logger = structlog.get_logger()

ADMIN_STATS_CACHE_KEY = "dashboard:admin_stats"
ADMIN_STATS_CACHE_TTL = 10  # seconds


def _empty_status_counts() -> dict[str, int]:
    return {s.value: 0 for s in IdeaStatus}


async def get_user_dashboard(db: AsyncSession, user_id: str) -> dict[str, Any]:
    """Summary for the user dashboard."""
    result = await db.execute(
        select(Idea.status, func.count())
        .where(Idea.user_id == user_id)
        .group_by(Idea.status)
    )
    by_status = _empty_status_counts()
    for status, count in result.all():
        by_status[status] = count

    points = await get_points(db, user_id)
    return {
        "ideas_total": sum(by_status.values()),
        "ideas_by_status": by_status,
        "total_points": points.total_points if points else 0,
        "ideas_implemented": points.ideas_implemented if points else 0,
        "ranking_position": await get_user_position(db, user_id),
    }


async def _compute_admin_stats(db: AsyncSession) -> dict[str, Any]:
    status_rows = await db.execute(select(Idea.status, func.count()).group_by(Idea.status))
    by_status = _empty_status_counts()
    for status, count in status_rows.all():
        by_status[status] = count

    category_rows = await db.execute(select(Idea.category, func.count()).group_by(Idea.category))
    by_category = {c: 0 for c in CATEGORY_LABELS}
    for category, count in category_rows.all():
        by_category[category] = count

    users_total = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    users_active = (
        await db.execute(select(func.count()).select_from(User).where(User.is_active.is_(True)))
    ).scalar_one()
    points_total = (await db.execute(select(func.coalesce(func.sum(UserPoints.total_points), 0)))).scalar_one()

    ideas_total = sum(by_status.values())
    approved = by_status[IdeaStatus.APPROVED.value]
    return {
        "ideas_total": ideas_total,
        "ideas_by_status": by_status,
        "ideas_by_category": by_category,
        "approval_rate": round(approved * 100 / ideas_total, 1) if ideas_total else 0.0,
        "users_total": users_total,
        "users_active": users_active,
        "points_awarded_total": int(points_total),
    }


async def get_admin_dashboard(db: AsyncSession) -> dict[str, Any]:
    """Platform-wide statistics (cached briefly in Redis when available)."""
    if redis_available():
        try:
            cached = await get_redis().get(ADMIN_STATS_CACHE_KEY)
            if cached:
                return json.loads(cached)
        except RedisError:
            logger.warning("dashboard_cache_read_failed", exc_info=True)

    stats = await _compute_admin_stats(db)

    if redis_available():
        try:
            await get_redis().set(ADMIN_STATS_CACHE_KEY, json.dumps(stats), ex=ADMIN_STATS_CACHE_TTL)
        except RedisError:
            logger.warning("dashboard_cache_write_failed", exc_info=True)
    return stats
