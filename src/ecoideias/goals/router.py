"""Goal endpoints: listing for everyone, CRUD for administrators."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.dependencies import get_current_user, require_admin
from ecoideias.database import get_session
from ecoideias.db.models import Goal, User
from ecoideias.goals.schemas import GoalCreateRequest, GoalResponse, GoalUpdateRequest
from ecoideias.goals.service import (
    create_goal,
    delete_goal,
    get_goal,
    goal_progress,
    list_goals,
    progress_percent,
    update_goal,
)

router = APIRouter(prefix="/api/v1/goals", tags=["Goals"])
admin_router = APIRouter(prefix="/api/v1/admin/goals", tags=["Admin Goals"])


async def _goal_response(db: AsyncSession, goal: Goal) -> GoalResponse:
    progress = await goal_progress(db, goal)
    return GoalResponse(
        id=goal.id,
        title=goal.title,
        description=goal.description,
        category=goal.category,
        target_count=goal.target_count,
        start_date=goal.start_date,
        end_date=goal.end_date,
        progress=progress,
        percent=progress_percent(progress, goal.target_count),
        created_at=goal.created_at,
    )


async def _get_or_404(db: AsyncSession, goal_id: str) -> Goal:
    goal = await get_goal(db, goal_id)
    if goal is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return goal


@router.get("", response_model=list[GoalResponse])
async def goals(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[GoalResponse]:
    """All goals with their current progress."""
    return [await _goal_response(db, g) for g in await list_goals(db)]


@admin_router.post("", response_model=GoalResponse, status_code=201)
async def admin_create_goal(
    body: GoalCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> GoalResponse:
    data = body.model_dump()
    data["category"] = body.category.value if body.category else None
    goal = await create_goal(db, admin.id, data)
    await db.commit()
    return await _goal_response(db, goal)


@admin_router.get("/{goal_id}", response_model=GoalResponse)
async def admin_get_goal(
    goal_id: str,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> GoalResponse:
    return await _goal_response(db, await _get_or_404(db, goal_id))


@admin_router.patch("/{goal_id}", response_model=GoalResponse)
async def admin_update_goal(
    goal_id: str,
    body: GoalUpdateRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> GoalResponse:
    goal = await _get_or_404(db, goal_id)
    updates = body.model_dump(exclude_unset=True)
    if body.category is not None:
        updates["category"] = body.category.value
    try:
        await update_goal(db, goal, updates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return await _goal_response(db, goal)


@admin_router.delete("/{goal_id}", status_code=204)
async def admin_delete_goal(
    goal_id: str,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Response:
    goal = await _get_or_404(db, goal_id)
    await delete_goal(db, goal)
    await db.commit()
    return Response(status_code=204)
