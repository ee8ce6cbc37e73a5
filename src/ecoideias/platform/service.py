"""Platform settings: point values and the status-notification toggle."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.db.models import PlatformSettings

logger = structlog.get_logger()

SETTINGS_ROW_ID = 1


async def get_platform_settings(db: AsyncSession) -> PlatformSettings:
    """Return the settings row, creating it with defaults on first access."""
    result = await db.execute(select(PlatformSettings).where(PlatformSettings.id == SETTINGS_ROW_ID))
    row = result.scalar_one_or_none()
    if row is None:
        row = PlatformSettings(
            id=SETTINGS_ROW_ID,
            points_per_submission=10,
            points_per_approval=100,
            points_per_implementation=50,
            notify_status_changes=True,
            updated_at=datetime.now(timezone.utc),
        )
        db.add(row)
        await db.flush()
    return row


async def update_platform_settings(db: AsyncSession, updates: dict[str, Any]) -> PlatformSettings:
    """Apply a partial update. Unknown keys are ignored."""
    row = await get_platform_settings(db)
    for field in ("points_per_submission", "points_per_approval", "points_per_implementation", "notify_status_changes"):
        if field in updates and updates[field] is not None:
            setattr(row, field, updates[field])
    row.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("platform_settings_updated", fields=sorted(k for k, v in updates.items() if v is not None))
    return row
