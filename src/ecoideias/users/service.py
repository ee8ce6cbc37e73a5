"""Account management: own profile and admin CRUD.

Rules:
- Accounts are never deleted, only deactivated
- Administrators cannot deactivate or demote themselves
- Email changes keep the profile's copy in sync
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.password import hash_password, validate_password_strength
from ecoideias.auth.roles import ROLE_ADMIN
from ecoideias.auth.service import (
    EmailAlreadyRegisteredError,
    get_profile,
    get_role,
    get_user_by_email,
    set_role,
)
from ecoideias.db.models import Profile, User, UserPoints, UserRole

logger = structlog.get_logger()


async def update_own_profile(db: AsyncSession, user: User, name: str) -> Profile:
    """Rename the caller's profile."""
    profile = await get_profile(db, user.id)
    if profile is None:
        profile = Profile(user_id=user.id, name=name, email=user.email)
        db.add(profile)
    else:
        profile.name = name
        profile.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return profile


async def list_users(db: AsyncSession) -> list[tuple[User, Profile | None, UserPoints | None, bool]]:
    """Every account with profile, points and admin flag, newest first."""
    admin_ids = select(UserRole.user_id).where(UserRole.role == ROLE_ADMIN)
    result = await db.execute(
        select(User, Profile, UserPoints, User.id.in_(admin_ids).label("is_admin"))
        .outerjoin(Profile, Profile.user_id == User.id)
        .outerjoin(UserPoints, UserPoints.user_id == User.id)
        .order_by(User.created_at.desc())
    )
    return [(u, p, pts, bool(is_admin)) for u, p, pts, is_admin in result.all()]


async def count_users(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(User))
    return result.scalar_one()


async def update_user(
    db: AsyncSession,
    target: User,
    actor_id: str,
    updates: dict[str, Any],
) -> User:
    """
    Apply an admin edit to an account.

    Raises:
        EmailAlreadyRegisteredError: If the new email belongs to another account.
        PasswordStrengthError: If the new password is rejected.
        ValueError: If an admin tries to deactivate or demote themselves.
    """
    is_self = target.id == actor_id
    if is_self and updates.get("is_active") is False:
        msg = "You cannot deactivate your own account"
        raise ValueError(msg)
    if is_self and updates.get("role") not in (None, ROLE_ADMIN):
        msg = "You cannot remove your own admin role"
        raise ValueError(msg)

    profile = await get_profile(db, target.id)

    email = updates.get("email")
    if email and email != target.email:
        other = await get_user_by_email(db, email)
        if other is not None and other.id != target.id:
            msg = "Email already registered"
            raise EmailAlreadyRegisteredError(msg)
        target.email = email
        if profile is not None:
            profile.email = email

    name = updates.get("name")
    if name and profile is not None:
        profile.name = name.strip()
        profile.updated_at = datetime.now(timezone.utc)

    password = updates.get("password")
    if password:
        validate_password_strength(password)
        target.password_hash = hash_password(password)

    if updates.get("is_active") is not None:
        target.is_active = updates["is_active"]

    role = updates.get("role")
    if role and role != await get_role(db, target.id):
        await set_role(db, target.id, role)

    await db.flush()
    logger.info(
        "user_updated",
        user_id=target.id,
        actor_id=actor_id,
        fields=sorted(k for k, v in updates.items() if v is not None and k != "password"),
    )
    return target


async def deactivate_user(db: AsyncSession, target: User, actor_id: str) -> User:
    """
    Deactivate an account.

    Raises:
        ValueError: If an admin tries to deactivate themselves.
    """
    return await update_user(db, target, actor_id, {"is_active": False})
