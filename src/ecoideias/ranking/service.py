"""Points ranking: top users joined with their profiles in one query."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.db.models import Profile, UserPoints
from ecoideias.ranking.schemas import RankingEntry

DEFAULT_NAME = "Usuário"

# Icons for the podium; positions after the third show their label only
_PODIUM_ICONS = ("trophy", "medal", "award")


def initials(name: str | None) -> str:
    """First letters of the first two words, uppercased. "U" when there is no name."""
    if not name or not name.strip():
        return "U"
    return "".join(part[0] for part in name.split()).upper()[:2]


def rank_icon(index: int) -> str | None:
    """Icon for a 0-based ranking index."""
    if 0 <= index < len(_PODIUM_ICONS):
        return _PODIUM_ICONS[index]
    return None


async def get_ranking(db: AsyncSession, limit: int = 10) -> list[RankingEntry]:
    """Top users by total points. Ties go to more approvals, then a stable id order."""
    result = await db.execute(
        select(UserPoints, Profile.name, Profile.email)
        .outerjoin(Profile, Profile.user_id == UserPoints.user_id)
        .order_by(
            UserPoints.total_points.desc(),
            UserPoints.ideas_approved.desc(),
            UserPoints.user_id,
        )
        .limit(limit)
    )

    entries = []
    for index, (points, name, email) in enumerate(result.all()):
        entries.append(RankingEntry(
            position=index + 1,
            user_id=points.user_id,
            name=name or DEFAULT_NAME,
            email=email,
            initials=initials(name),
            total_points=points.total_points,
            ideas_submitted=points.ideas_submitted,
            ideas_approved=points.ideas_approved,
            ideas_implemented=points.ideas_implemented,
            rank_icon=rank_icon(index),
            rank_label=f"#{index + 1}",
        ))
    return entries


async def get_user_position(db: AsyncSession, user_id: str) -> int | None:
    """1-based position of a user in the full ranking, None if they have no points row."""
    result = await db.execute(
        select(UserPoints.user_id).order_by(
            UserPoints.total_points.desc(),
            UserPoints.ideas_approved.desc(),
            UserPoints.user_id,
        )
    )
    for position, row_user_id in enumerate(result.scalars().all(), start=1):
        if row_user_id == user_id:
            return position
    return None
