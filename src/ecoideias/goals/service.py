"""Sustainability goals: targets of approved ideas within a period."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.db.models import Goal, Idea
from ecoideias.ideas.constants import IdeaStatus

logger = structlog.get_logger()


def _day_start(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def progress_percent(progress: int, target: int) -> int:
    """Whole percent of the target reached, capped at 100."""
    if target <= 0:
        return 100
    return min(100, progress * 100 // target)


async def goal_progress(db: AsyncSession, goal: Goal) -> int:
    """Approved ideas created within the goal period (both ends inclusive), in its category if set."""
    query = (
        select(func.count())
        .select_from(Idea)
        .where(Idea.status == IdeaStatus.APPROVED.value)
        .where(Idea.created_at >= _day_start(goal.start_date))
        .where(Idea.created_at < _day_start(goal.end_date) + timedelta(days=1))
    )
    if goal.category:
        query = query.where(Idea.category == goal.category)
    result = await db.execute(query)
    return result.scalar_one()


async def list_goals(db: AsyncSession) -> list[Goal]:
    result = await db.execute(select(Goal).order_by(Goal.end_date.desc(), Goal.created_at.desc()))
    return list(result.scalars().all())


async def get_goal(db: AsyncSession, goal_id: str) -> Goal | None:
    result = await db.execute(select(Goal).where(Goal.id == goal_id))
    return result.scalar_one_or_none()


async def create_goal(db: AsyncSession, created_by: str, data: dict[str, Any]) -> Goal:
    goal = Goal(
        title=data["title"],
        description=data.get("description"),
        category=data.get("category"),
        target_count=data["target_count"],
        start_date=data["start_date"],
        end_date=data["end_date"],
        created_by=created_by,
        created_at=datetime.now(timezone.utc),
    )
    db.add(goal)
    await db.flush()
    logger.info("goal_created", goal_id=goal.id, created_by=created_by)
    return goal


async def update_goal(db: AsyncSession, goal: Goal, updates: dict[str, Any]) -> Goal:
    """
    Apply a partial update.

    Raises:
        ValueError: If the resulting period ends before it starts.
    """
    start = updates.get("start_date") or goal.start_date
    end = updates.get("end_date") or goal.end_date
    if end < start:
        msg = "end_date must not be before start_date"
        raise ValueError(msg)

    for field in ("title", "description", "category", "target_count", "start_date", "end_date"):
        if field in updates:
            setattr(goal, field, updates[field])
    await db.flush()
    return goal


async def delete_goal(db: AsyncSession, goal: Goal) -> None:
    await db.delete(goal)
    await db.flush()
    logger.info("goal_deleted", goal_id=goal.id)
