"""Idea workflow: submission, listing and admin evaluation.

Rules:
- New ideas start "Em Análise" and earn the submission points
- Approval points are granted on the first approval only (approved_at marks
  the grant); rejecting later never takes them back
- Only approved ideas can be implemented, once
- Every state change appends to the activity log
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.activity.service import record_activity
from ecoideias.db.models import Activity, Idea, Profile
from ecoideias.email.service import get_email_service
from ecoideias.ideas.constants import ActivityType, IdeaStatus
from ecoideias.platform.service import get_platform_settings
from ecoideias.points.service import award_approval, award_implementation, award_submission

logger = structlog.get_logger()


@dataclass
class EvaluationResult:
    """Outcome of an admin evaluation."""

    idea: Idea
    previous_status: str
    status_changed: bool
    points_granted: int
    activity: Activity | None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_idea(db: AsyncSession, idea_id: str) -> Idea | None:
    result = await db.execute(select(Idea).where(Idea.id == idea_id))
    return result.scalar_one_or_none()


async def get_idea_with_author(db: AsyncSession, idea_id: str) -> tuple[Idea, Profile | None] | None:
    """Fetch an idea together with its author's profile."""
    result = await db.execute(
        select(Idea, Profile)
        .outerjoin(Profile, Profile.user_id == Idea.user_id)
        .where(Idea.id == idea_id)
    )
    row = result.first()
    if row is None:
        return None
    return row[0], row[1]


async def list_user_ideas(db: AsyncSession, user_id: str, status: str | None = None) -> list[Idea]:
    """A user's own ideas, newest first."""
    query = select(Idea).where(Idea.user_id == user_id)
    if status:
        query = query.where(Idea.status == status)
    result = await db.execute(query.order_by(Idea.created_at.desc()))
    return list(result.scalars().all())


async def list_ideas(
    db: AsyncSession,
    status: str | None = None,
    category: str | None = None,
    search: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[tuple[Idea, Profile | None]], int]:
    """All ideas with their author profiles (admin listing), paginated."""
    conditions = []
    if status:
        conditions.append(Idea.status == status)
    if category:
        conditions.append(Idea.category == category)
    if search:
        conditions.append(func.lower(Idea.title).contains(search.lower()))

    total_result = await db.execute(select(func.count()).select_from(Idea).where(*conditions))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Idea, Profile)
        .outerjoin(Profile, Profile.user_id == Idea.user_id)
        .where(*conditions)
        .order_by(Idea.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    return [(idea, profile) for idea, profile in result.all()], total


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def submit_idea(
    db: AsyncSession,
    user_id: str,
    title: str,
    description: str,
    category: str,
    impact: str | None = None,
) -> tuple[Idea, Activity]:
    """Create an idea in review, log it and award the submission points."""
    now = datetime.now(timezone.utc)
    idea = Idea(
        user_id=user_id,
        title=title,
        description=description,
        category=category,
        impact=impact,
        status=IdeaStatus.IN_REVIEW.value,
        points_awarded=0,
        created_at=now,
        updated_at=now,
    )
    db.add(idea)
    await db.flush()

    activity = await record_activity(db, user_id, ActivityType.IDEA_CREATED, idea.id, title)
    platform = await get_platform_settings(db)
    await award_submission(db, user_id, platform.points_per_submission)

    logger.info("idea_submitted", idea_id=idea.id, user_id=user_id, category=category)
    return idea, activity


def _activity_for_status(status: str) -> ActivityType:
    if status == IdeaStatus.APPROVED.value:
        return ActivityType.IDEA_APPROVED
    if status == IdeaStatus.REJECTED.value:
        return ActivityType.IDEA_REJECTED
    return ActivityType.IDEA_STATUS_CHANGED


async def evaluate_idea(
    db: AsyncSession,
    idea_id: str,
    admin_id: str,
    status: str,
    points: int | None = None,
    feedback: str | None = None,
) -> EvaluationResult:
    """
    Apply an admin evaluation.

    Raises:
        LookupError: If the idea does not exist.
        ValueError: If the status or point amount is invalid.
    """
    if status not in {s.value for s in IdeaStatus}:
        msg = f"Invalid status: {status}"
        raise ValueError(msg)
    if points is not None and points < 0:
        msg = "Points cannot be negative"
        raise ValueError(msg)

    idea = await get_idea(db, idea_id)
    if idea is None:
        msg = "Idea not found"
        raise LookupError(msg)

    now = datetime.now(timezone.utc)
    previous_status = idea.status
    changed = previous_status != status

    if feedback is not None:
        idea.feedback = feedback
    idea.evaluated_by = admin_id
    idea.evaluated_at = now
    idea.updated_at = now

    if not changed:
        await db.flush()
        return EvaluationResult(idea, previous_status, False, 0, None)

    idea.status = status
    granted = 0
    if status == IdeaStatus.APPROVED.value and idea.approved_at is None:
        if points is None:
            points = (await get_platform_settings(db)).points_per_approval
        await award_approval(db, idea.user_id, points)
        idea.approved_at = now
        idea.points_awarded = points
        granted = points

    activity = await record_activity(
        db,
        idea.user_id,
        _activity_for_status(status),
        idea.id,
        idea.title,
        metadata={"old_status": previous_status, "new_status": status},
    )
    await db.flush()

    logger.info(
        "idea_evaluated",
        idea_id=idea.id,
        admin_id=admin_id,
        old_status=previous_status,
        new_status=status,
        points_granted=granted,
    )
    return EvaluationResult(idea, previous_status, True, granted, activity)


async def implement_idea(db: AsyncSession, idea_id: str, admin_id: str) -> tuple[Idea, Activity]:
    """
    Mark an approved idea as implemented and award the implementation points.

    Raises:
        LookupError: If the idea does not exist.
        ValueError: If the idea is not approved or already implemented.
    """
    idea = await get_idea(db, idea_id)
    if idea is None:
        msg = "Idea not found"
        raise LookupError(msg)
    if idea.status != IdeaStatus.APPROVED.value:
        msg = "Only approved ideas can be implemented"
        raise ValueError(msg)
    if idea.implemented_at is not None:
        msg = "Idea already implemented"
        raise ValueError(msg)

    now = datetime.now(timezone.utc)
    idea.implemented_at = now
    idea.updated_at = now

    platform = await get_platform_settings(db)
    await award_implementation(db, idea.user_id, platform.points_per_implementation)
    activity = await record_activity(db, idea.user_id, ActivityType.IDEA_IMPLEMENTED, idea.id, idea.title)
    await db.flush()

    logger.info("idea_implemented", idea_id=idea.id, admin_id=admin_id)
    return idea, activity


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


async def notify_status_change(
    db: AsyncSession,
    idea: Idea,
    previous_status: str,
    points_granted: int = 0,
) -> bool:
    """
    Email the author about a status change if notifications are enabled.

    ``points_granted`` is what this evaluation awarded; re-approvals and
    zero-point approvals announce no points.

    Returns True when the provider accepted the message. Failures are logged.
    """
    platform = await get_platform_settings(db)
    if not platform.notify_status_changes:
        return False

    result = await db.execute(select(Profile).where(Profile.user_id == idea.user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        logger.warning("status_email_skipped", idea_id=idea.id, reason="no_profile")
        return False

    try:
        message_id = await get_email_service().send_template(
            to=profile.email,
            template_name="status_update",
            context={
                "user_name": profile.name,
                "idea_title": idea.title,
                "old_status": previous_status,
                "new_status": idea.status,
                "approval_points": points_granted,
            },
        )
    except Exception:
        logger.exception("status_email_failed", idea_id=idea.id)
        return False

    if message_id is None:
        logger.warning("status_email_failed", idea_id=idea.id)
        return False
    return True
