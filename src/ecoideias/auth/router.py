"""Authentication router: all /api/v1/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.dependencies import get_current_user
from ecoideias.auth.jwt import create_access_token
from ecoideias.auth.password import PasswordStrengthError
from ecoideias.auth.schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    StatusResponse,
    TokenResponse,
    UserResponse,
)
from ecoideias.auth.service import (
    authenticate_user,
    build_user_response,
    change_password,
    create_reset_token,
    get_profile,
    get_user_by_email,
    reset_password,
)
from ecoideias.config import get_settings
from ecoideias.database import get_session
from ecoideias.db.models import User
from ecoideias.email.service import get_email_service

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Sign in with email + password."""
    try:
        user = await authenticate_user(db, body.email, body.password)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    user_response = await build_user_response(db, user)
    await db.commit()

    settings = get_settings()
    logger.info("user_logged_in", user_id=user.id, role=user_response.role)
    return TokenResponse(
        access_token=create_access_token(user.id, user_response.role),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=user_response,
    )


@router.get("/session", response_model=UserResponse)
async def session(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Return the signed-in account and its role flag."""
    return await build_user_response(db, user)


@router.post("/forgot-password", response_model=StatusResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_session),
) -> StatusResponse:
    """Request password reset email. Always returns 200."""
    user = await get_user_by_email(db, body.email)

    if user is not None and user.is_active:
        try:
            raw_token = await create_reset_token(db, user.id)
            await db.commit()
            profile = await get_profile(db, user.id)
            settings = get_settings()
            reset_url = f"{settings.frontend_base_url}/reset-password?token={raw_token}"
            await get_email_service().send_template(
                to=user.email,
                template_name="password_reset",
                context={"reset_url": reset_url, "user_name": profile.name if profile else None},
            )
        except Exception:
            logger.exception("password_reset_email_failed", user_id=user.id)

    return StatusResponse(status="If that email exists, a reset link has been sent.")


@router.post("/reset-password", response_model=StatusResponse)
async def reset_password_endpoint(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_session),
) -> StatusResponse:
    """Set a new password using the token from the reset email."""
    try:
        await reset_password(db, body.token, body.new_password)
    except PasswordStrengthError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return StatusResponse(status="password_reset_complete")


@router.post("/change-password", response_model=StatusResponse)
async def change_password_endpoint(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> StatusResponse:
    """Change password while logged in."""
    try:
        await change_password(db, user, body.current_password, body.new_password)
    except PermissionError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except PasswordStrengthError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    await db.commit()
    logger.info("password_changed", user_id=user.id)
    return StatusResponse(status="password_changed")
