"""Per-user point aggregate.

Every mutation here only adds: totals and counters never decrease.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.db.models import UserPoints

logger = structlog.get_logger()


async def get_or_create_points(db: AsyncSession, user_id: str) -> UserPoints:
    """Get or create the points row for a user."""
    result = await db.execute(select(UserPoints).where(UserPoints.user_id == user_id))
    points = result.scalar_one_or_none()
    if points is None:
        points = UserPoints(
            user_id=user_id,
            total_points=0,
            ideas_submitted=0,
            ideas_approved=0,
            ideas_implemented=0,
            updated_at=datetime.now(timezone.utc),
        )
        db.add(points)
        await db.flush()
    return points


async def get_points(db: AsyncSession, user_id: str) -> UserPoints | None:
    result = await db.execute(select(UserPoints).where(UserPoints.user_id == user_id))
    return result.scalar_one_or_none()


async def _accrue(db: AsyncSession, user_id: str, amount: int, counter: str, reason: str) -> UserPoints:
    if amount < 0:
        msg = "Point amounts cannot be negative"
        raise ValueError(msg)
    points = await get_or_create_points(db, user_id)
    points.total_points += amount
    setattr(points, counter, getattr(points, counter) + 1)
    points.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("points_awarded", user_id=user_id, amount=amount, reason=reason, total=points.total_points)
    return points


async def award_submission(db: AsyncSession, user_id: str, amount: int) -> UserPoints:
    """Count a submitted idea and award the submission points."""
    return await _accrue(db, user_id, amount, "ideas_submitted", "submission")


async def award_approval(db: AsyncSession, user_id: str, amount: int) -> UserPoints:
    """Count an approved idea and award the approval points.

    Callers must guarantee this runs at most once per idea.
    """
    return await _accrue(db, user_id, amount, "ideas_approved", "approval")


async def award_implementation(db: AsyncSession, user_id: str, amount: int) -> UserPoints:
    """Count an implemented idea and award the implementation points."""
    return await _accrue(db, user_id, amount, "ideas_implemented", "implementation")
