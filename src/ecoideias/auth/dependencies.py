"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.jwt import verify_token
from ecoideias.auth.roles import ROLE_ADMIN
from ecoideias.auth.service import get_user_by_id, has_role
from ecoideias.database import get_session
from ecoideias.db.models import User

_bearer = HTTPBearer(auto_error=False)

_UNAUTHORIZED_HEADERS = {"WWW-Authenticate": "Bearer"}


async def _resolve_user(credentials: HTTPAuthorizationCredentials, db: AsyncSession) -> User:
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail="Invalid authentication", headers=_UNAUTHORIZED_HEADERS) from e

    user = await get_user_by_id(db, str(payload["sub"]))
    if user is None or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid authentication", headers=_UNAUTHORIZED_HEADERS)
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Extract and verify the bearer token, return the User model.

    Raises 401 (not HTTPBearer's default 403) when the header is missing,
    the token is invalid or expired, or the account no longer exists or is
    deactivated.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Authentication required", headers=_UNAUTHORIZED_HEADERS)
    return await _resolve_user(credentials, db)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User | None:
    """Like get_current_user, but anonymous or invalid sessions yield None."""
    if credentials is None:
        return None
    try:
        return await _resolve_user(credentials, db)
    except HTTPException:
        return None


async def require_admin(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> User:
    """Same as get_current_user but additionally requires the admin role (403 otherwise)."""
    if not await has_role(db, user.id, ROLE_ADMIN):
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
