"""Admin platform settings endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.dependencies import require_admin
from ecoideias.database import get_session
from ecoideias.db.models import PlatformSettings, User
from ecoideias.platform.schemas import PlatformSettingsResponse, PlatformSettingsUpdate
from ecoideias.platform.service import get_platform_settings, update_platform_settings

router = APIRouter(prefix="/api/v1/admin/settings", tags=["Platform Settings"])


def _to_response(row: PlatformSettings) -> PlatformSettingsResponse:
    return PlatformSettingsResponse(
        points_per_submission=row.points_per_submission,
        points_per_approval=row.points_per_approval,
        points_per_implementation=row.points_per_implementation,
        notify_status_changes=row.notify_status_changes,
        updated_at=row.updated_at,
    )


@router.get("", response_model=PlatformSettingsResponse)
async def read_settings(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> PlatformSettingsResponse:
    row = await get_platform_settings(db)
    await db.commit()
    return _to_response(row)


@router.patch("", response_model=PlatformSettingsResponse)
async def patch_settings(
    body: PlatformSettingsUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> PlatformSettingsResponse:
    """Update point values or the status-notification toggle."""
    row = await update_platform_settings(db, body.model_dump(exclude_unset=True))
    await db.commit()
    return _to_response(row)
