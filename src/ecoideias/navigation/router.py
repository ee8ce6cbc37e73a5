"""Navigation endpoint: resolves frontend route decisions for the caller."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.dependencies import get_optional_user
from ecoideias.auth.roles import ROLE_ADMIN
from ecoideias.auth.service import has_role
from ecoideias.database import get_session
from ecoideias.db.models import User
from ecoideias.navigation.guards import SessionState, resolve_route

router = APIRouter(prefix="/api/v1/navigation", tags=["Navigation"])


class RouteDecisionResponse(BaseModel):
    action: str
    location: str | None = None
    route: str | None = None
    params: dict[str, str] = {}
    state: dict[str, str] = {}


@router.get("/resolve", response_model=RouteDecisionResponse)
async def resolve(
    path: str = Query(..., min_length=1, max_length=2048),
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
) -> RouteDecisionResponse:
    """Where navigating to ``path`` leads for the current session."""
    session = SessionState(
        loading=False,
        user_id=user.id if user else None,
        is_admin=bool(user) and await has_role(db, user.id, ROLE_ADMIN),
    )
    decision = resolve_route(path, session)
    return RouteDecisionResponse(
        action=decision.action.value,
        location=decision.location,
        route=decision.route,
        params=decision.params,
        state=decision.state,
    )
