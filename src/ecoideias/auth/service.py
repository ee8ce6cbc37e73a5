"""
Authentication business logic.

Handles account creation, credential checks, role lookups and the password
reset flow.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select, update

from ecoideias.auth.password import (
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from ecoideias.auth.roles import ROLE_ADMIN, ROLE_USER, ROLES
from ecoideias.auth.schemas import UserResponse
from ecoideias.config import get_settings
from ecoideias.db.models import PasswordResetToken, Profile, User, UserRole

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class EmailAlreadyRegisteredError(ValueError):
    """The email belongs to another account."""


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def get_profile(db: AsyncSession, user_id: str) -> Profile | None:
    """Fetch the profile row of a user."""
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def has_role(db: AsyncSession, user_id: str, role: str) -> bool:
    """Return True if the user holds the given role."""
    result = await db.execute(
        select(UserRole.id).where(UserRole.user_id == user_id, UserRole.role == role)
    )
    return result.first() is not None


async def get_role(db: AsyncSession, user_id: str) -> str:
    """Effective role of a user: admin if granted, otherwise user."""
    return ROLE_ADMIN if await has_role(db, user_id, ROLE_ADMIN) else ROLE_USER


async def set_role(db: AsyncSession, user_id: str, role: str) -> None:
    """Replace the user's role grant."""
    if role not in ROLES:
        msg = f"Unknown role: {role}"
        raise ValueError(msg)
    result = await db.execute(select(UserRole).where(UserRole.user_id == user_id))
    for grant in result.scalars().all():
        await db.delete(grant)
    await db.flush()
    db.add(UserRole(user_id=user_id, role=role))
    await db.flush()


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


async def create_account(
    db: AsyncSession,
    email: str,
    password: str,
    name: str,
    role: str = ROLE_USER,
) -> User:
    """
    Create a user with its profile and role grant.

    Raises:
        PasswordStrengthError: If the password is rejected.
        ValueError: If the email is already registered or the role is unknown.
    """
    validate_password_strength(password)
    email = email.lower().strip()

    if await get_user_by_email(db, email) is not None:
        msg = "Email already registered"
        raise EmailAlreadyRegisteredError(msg)

    user = User(
        email=email,
        password_hash=hash_password(password),
        is_active=True,
        created_at=datetime.now(timezone.utc),
    )
    db.add(user)
    await db.flush()

    db.add(Profile(user_id=user.id, name=name.strip(), email=email))
    await set_role(db, user.id, role)
    logger.info("account_created", user_id=user.id, role=role)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Authenticate a user with email + password.

    Raises:
        ValueError: If credentials are invalid.
        PermissionError: If the account is deactivated.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        msg = "Invalid email or password"
        raise ValueError(msg)

    if not user.is_active:
        msg = "Account is disabled"
        raise PermissionError(msg)

    user.last_login = datetime.now(timezone.utc)
    user.login_count = (user.login_count or 0) + 1
    await db.flush()

    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.flush()
        logger.info("password_rehashed", user_id=user.id)

    return user


async def change_password(db: AsyncSession, user: User, current_password: str, new_password: str) -> None:
    """
    Change a password after verifying the current one.

    Raises:
        PermissionError: If the current password is wrong.
        PasswordStrengthError: If the new password is rejected.
    """
    if not verify_password(current_password, user.password_hash):
        msg = "Current password is incorrect"
        raise PermissionError(msg)
    validate_password_strength(new_password)
    user.password_hash = hash_password(new_password)
    await db.flush()


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


async def create_reset_token(db: AsyncSession, user_id: str) -> str:
    """
    Create a password reset token, invalidating earlier unused ones.

    Returns the raw token to send to the user.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    raw_token = secrets.token_urlsafe(48)
    token_hash = hashlib.sha256(raw_token.encode()).hexdigest()

    await db.execute(
        update(PasswordResetToken)
        .where(PasswordResetToken.user_id == user_id)
        .where(PasswordResetToken.used_at.is_(None))
        .values(used_at=now)
    )

    db.add(PasswordResetToken(
        user_id=user_id,
        token_hash=token_hash,
        created_at=now,
        expires_at=now + timedelta(minutes=settings.password_reset_token_ttl_minutes),
    ))
    await db.flush()
    return raw_token


async def verify_reset_token(db: AsyncSession, raw_token: str) -> str:
    """
    Verify a password reset token and mark it used.

    Returns the user_id if valid.

    Raises:
        ValueError: If token is invalid, expired, or already used.
    """
    token_hash = hashlib.sha256(raw_token.encode()).hexdigest()
    result = await db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token_hash == token_hash)
    )
    token = result.scalar_one_or_none()

    if token is None:
        msg = "Invalid or expired reset token"
        raise ValueError(msg)
    if token.used_at is not None:
        msg = "Token has already been used"
        raise ValueError(msg)
    if as_utc(token.expires_at) < datetime.now(timezone.utc):
        msg = "Reset token has expired"
        raise ValueError(msg)

    token.used_at = datetime.now(timezone.utc)
    await db.flush()
    return token.user_id


async def reset_password(db: AsyncSession, raw_token: str, new_password: str) -> str:
    """
    Set a new password using a reset token. Returns the user id.

    Raises:
        PasswordStrengthError: If the new password is rejected.
        ValueError: If the token is invalid.
    """
    validate_password_strength(new_password)
    user_id = await verify_reset_token(db, raw_token)
    user = await get_user_by_id(db, user_id)
    if user is None:
        msg = "User not found"
        raise ValueError(msg)
    user.password_hash = hash_password(new_password)
    await db.flush()
    logger.info("password_reset_complete", user_id=user_id)
    return user_id


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------


async def build_user_response(db: AsyncSession, user: User) -> UserResponse:
    """Combine a user with its profile name and effective role."""
    profile = await get_profile(db, user.id)
    role = await get_role(db, user.id)
    return UserResponse(
        id=user.id,
        name=profile.name if profile else user.email,
        email=user.email,
        role=role,
        is_admin=role == ROLE_ADMIN,
        is_active=user.is_active,
        created_at=user.created_at,
        last_login=user.last_login,
    )
