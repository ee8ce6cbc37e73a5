"""Dashboard endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.dependencies import get_current_user, require_admin
from ecoideias.dashboard.schemas import AdminDashboardResponse, UserDashboardResponse
from ecoideias.dashboard.service import get_admin_dashboard, get_user_dashboard
from ecoideias.database import get_session
from ecoideias.db.models import User

router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])
admin_router = APIRouter(prefix="/api/v1/admin/dashboard", tags=["Dashboard"])


@router.get("", response_model=UserDashboardResponse)
async def user_dashboard(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserDashboardResponse:
    """Own idea counts, points and ranking position."""
    return UserDashboardResponse(**await get_user_dashboard(db, user.id))


@admin_router.get("", response_model=AdminDashboardResponse)
async def admin_dashboard(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> AdminDashboardResponse:
    """Platform-wide idea, user and point statistics."""
    return AdminDashboardResponse(**await get_admin_dashboard(db))
