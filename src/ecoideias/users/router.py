"""Account endpoints: own profile and admin user management."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.dependencies import get_current_user, require_admin
from ecoideias.auth.password import PasswordStrengthError
from ecoideias.auth.roles import ROLE_ADMIN
from ecoideias.auth.schemas import UserResponse
from ecoideias.auth.service import (
    EmailAlreadyRegisteredError,
    build_user_response,
    create_account,
    get_user_by_id,
)
from ecoideias.config import get_settings
from ecoideias.database import get_session
from ecoideias.db.models import Profile, User, UserPoints
from ecoideias.email.service import get_email_service
from ecoideias.points.service import get_points
from ecoideias.users.schemas import (
    AdminUserCreateRequest,
    AdminUserListResponse,
    AdminUserResponse,
    AdminUserUpdateRequest,
    ProfileUpdateRequest,
)
from ecoideias.users.service import deactivate_user, list_users, update_own_profile, update_user

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/users", tags=["Users"])
admin_router = APIRouter(prefix="/api/v1/admin/users", tags=["Admin Users"])


def _admin_user_response(
    user: User,
    profile: Profile | None,
    points: UserPoints | None,
    is_admin: bool,
) -> AdminUserResponse:
    return AdminUserResponse(
        id=user.id,
        name=profile.name if profile else user.email,
        email=user.email,
        role=ROLE_ADMIN if is_admin else "user",
        is_admin=is_admin,
        is_active=user.is_active,
        created_at=user.created_at,
        last_login=user.last_login,
        total_points=points.total_points if points else 0,
        ideas_submitted=points.ideas_submitted if points else 0,
        ideas_approved=points.ideas_approved if points else 0,
        ideas_implemented=points.ideas_implemented if points else 0,
    )


async def _load_admin_view(db: AsyncSession, user: User) -> AdminUserResponse:
    base = await build_user_response(db, user)
    points = await get_points(db, user.id)
    return AdminUserResponse(
        **base.model_dump(),
        total_points=points.total_points if points else 0,
        ideas_submitted=points.ideas_submitted if points else 0,
        ideas_approved=points.ideas_approved if points else 0,
        ideas_implemented=points.ideas_implemented if points else 0,
    )


# ---------------------------------------------------------------------------
# Own account
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
async def get_me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Get the authenticated user's account."""
    return await build_user_response(db, user)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Rename the authenticated user's profile."""
    await update_own_profile(db, user, body.name)
    await db.commit()
    return await build_user_response(db, user)


# ---------------------------------------------------------------------------
# Admin user management
# ---------------------------------------------------------------------------


@admin_router.get("", response_model=AdminUserListResponse)
async def admin_list_users(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> AdminUserListResponse:
    rows = await list_users(db)
    return AdminUserListResponse(
        users=[_admin_user_response(*row) for row in rows],
        total=len(rows),
    )


@admin_router.get("/{user_id}", response_model=AdminUserResponse)
async def admin_get_user(
    user_id: str,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> AdminUserResponse:
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return await _load_admin_view(db, user)


@admin_router.post("", response_model=AdminUserResponse, status_code=201)
async def admin_create_user(
    body: AdminUserCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> AdminUserResponse:
    """Create an account and send the welcome email."""
    try:
        user = await create_account(db, body.email, body.password, body.name, role=body.role)
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except PasswordStrengthError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    await db.commit()
    logger.info("user_created_by_admin", user_id=user.id, admin_id=admin.id, role=body.role)

    try:
        await get_email_service().send_template(
            to=user.email,
            template_name="account_created",
            context={"user_name": body.name, "login_url": get_settings().frontend_base_url},
        )
    except Exception:
        logger.exception("welcome_email_failed", user_id=user.id)

    return await _load_admin_view(db, user)


@admin_router.patch("/{user_id}", response_model=AdminUserResponse)
async def admin_update_user(
    user_id: str,
    body: AdminUserUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> AdminUserResponse:
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    try:
        await update_user(db, user, admin.id, body.model_dump(exclude_unset=True))
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except PasswordStrengthError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return await _load_admin_view(db, user)


@admin_router.delete("/{user_id}", response_model=AdminUserResponse)
async def admin_deactivate_user(
    user_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> AdminUserResponse:
    """Deactivate an account. Its ideas and points are kept."""
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    try:
        await deactivate_user(db, user, admin.id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return await _load_admin_view(db, user)
