"""Activity log: append-only recording and the latest-activity feed."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.activity.schemas import ActivityItem
from ecoideias.db.models import Activity, Profile
from ecoideias.ideas.constants import ActivityType

DEFAULT_NAME = "Usuário"
DEFAULT_TITLE = "uma ideia"

_ICONS: dict[str, str] = {
    ActivityType.IDEA_CREATED.value: "lightbulb",
    ActivityType.IDEA_APPROVED.value: "check-circle",
    ActivityType.IDEA_REJECTED.value: "x-circle",
}


def describe_activity(action_type: str, name: str | None, title: str | None) -> str:
    """Render the pt-BR sentence shown in the activity panel."""
    name = name or DEFAULT_NAME
    title = title or DEFAULT_TITLE

    if action_type == ActivityType.IDEA_CREATED.value:
        return f'{name} criou a ideia "{title}"'
    if action_type == ActivityType.IDEA_APPROVED.value:
        return f'{name} teve a ideia "{title}" aprovada \U0001f389'
    if action_type == ActivityType.IDEA_REJECTED.value:
        return f'A ideia "{title}" de {name} foi reprovada'
    if action_type == ActivityType.IDEA_STATUS_CHANGED.value:
        return f'{name} teve o status da ideia "{title}" alterado'
    if action_type == ActivityType.IDEA_IMPLEMENTED.value:
        return f'A ideia "{title}" de {name} foi implementada'
    return f"{name} realizou uma ação"


def activity_icon(action_type: str) -> str:
    return _ICONS.get(action_type, "clock")


async def record_activity(
    db: AsyncSession,
    user_id: str,
    action_type: ActivityType | str,
    entity_id: str,
    title: str,
    entity_type: str = "idea",
    metadata: dict[str, Any] | None = None,
) -> Activity:
    """Append an entry to the activity log. Entries are never updated or deleted."""
    activity = Activity(
        user_id=user_id,
        action_type=action_type.value if isinstance(action_type, ActivityType) else action_type,
        entity_type=entity_type,
        entity_id=entity_id,
        activity_metadata={"title": title, **(metadata or {})},
        created_at=datetime.now(timezone.utc),
    )
    db.add(activity)
    await db.flush()
    return activity


async def get_recent_activities(db: AsyncSession, limit: int = 20) -> list[ActivityItem]:
    """Latest activities, newest first, with the author name joined in the same query."""
    result = await db.execute(
        select(Activity, Profile.name)
        .outerjoin(Profile, Profile.user_id == Activity.user_id)
        .order_by(Activity.created_at.desc(), Activity.id)
        .limit(limit)
    )

    items = []
    for activity, name in result.all():
        metadata = activity.activity_metadata or {}
        title = metadata.get("title")
        items.append(ActivityItem(
            id=activity.id,
            user_id=activity.user_id,
            user_name=name or DEFAULT_NAME,
            action_type=activity.action_type,
            entity_type=activity.entity_type,
            entity_id=activity.entity_id,
            title=title or DEFAULT_TITLE,
            text=describe_activity(activity.action_type, name, title),
            icon=activity_icon(activity.action_type),
            metadata=metadata,
            created_at=activity.created_at,
        ))
    return items
