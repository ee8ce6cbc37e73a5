"""Startup seed data: the platform settings row and the bootstrap administrator."""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.roles import ROLE_ADMIN
from ecoideias.auth.service import create_account, get_role, get_user_by_email, set_role
from ecoideias.config import Settings
from ecoideias.platform.service import get_platform_settings

logger = structlog.get_logger()


async def seed(db: AsyncSession, settings: Settings) -> None:
    """Idempotent: create what is missing, never overwrite existing rows."""
    await get_platform_settings(db)

    email = settings.bootstrap_admin_email.strip().lower()
    if email and settings.bootstrap_admin_password:
        user = await get_user_by_email(db, email)
        if user is None:
            await create_account(
                db,
                email,
                settings.bootstrap_admin_password,
                settings.bootstrap_admin_name,
                role=ROLE_ADMIN,
            )
            logger.info("bootstrap_admin_created", email=email)
        elif await get_role(db, user.id) != ROLE_ADMIN:
            await set_role(db, user.id, ROLE_ADMIN)
            logger.info("bootstrap_admin_promoted", email=email)

    await db.commit()
