"""Idea endpoints: user submissions and the admin review queue."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.activity.realtime import publish_activity_created
from ecoideias.auth.dependencies import get_current_user, require_admin
from ecoideias.auth.roles import ROLE_ADMIN
from ecoideias.auth.service import has_role
from ecoideias.database import get_session
from ecoideias.db.models import Idea, Profile, User
from ecoideias.ideas.constants import CATEGORY_LABELS, IdeaCategory, IdeaStatus
from ecoideias.ideas.schemas import (
    EvaluateIdeaRequest,
    EvaluateIdeaResponse,
    IdeaCreateRequest,
    IdeaListResponse,
    IdeaResponse,
)
from ecoideias.ideas.service import (
    evaluate_idea,
    get_idea_with_author,
    implement_idea,
    list_ideas,
    list_user_ideas,
    notify_status_change,
    submit_idea,
)

router = APIRouter(prefix="/api/v1/ideas", tags=["Ideas"])
admin_router = APIRouter(prefix="/api/v1/admin/ideas", tags=["Admin Ideas"])


def idea_response(idea: Idea, profile: Profile | None = None) -> IdeaResponse:
    """Build an IdeaResponse from the ORM row and optional author profile."""
    return IdeaResponse(
        id=idea.id,
        user_id=idea.user_id,
        title=idea.title,
        description=idea.description,
        category=idea.category,
        category_label=CATEGORY_LABELS.get(idea.category, idea.category),
        impact=idea.impact,
        status=idea.status,
        points_awarded=idea.points_awarded,
        feedback=idea.feedback,
        evaluated_by=idea.evaluated_by,
        evaluated_at=idea.evaluated_at,
        approved_at=idea.approved_at,
        implemented_at=idea.implemented_at,
        created_at=idea.created_at,
        updated_at=idea.updated_at,
        author_name=profile.name if profile else None,
        author_email=profile.email if profile else None,
    )


# ---------------------------------------------------------------------------
# User endpoints
# ---------------------------------------------------------------------------


@router.post("", response_model=IdeaResponse, status_code=201)
async def create_idea(
    body: IdeaCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> IdeaResponse:
    """Submit a new sustainability idea."""
    idea, activity = await submit_idea(
        db,
        user.id,
        title=body.title,
        description=body.description,
        category=body.category.value,
        impact=body.impact,
    )
    await db.commit()
    await publish_activity_created(activity.id)
    return idea_response(idea)


@router.get("/mine", response_model=list[IdeaResponse])
async def my_ideas(
    status: IdeaStatus | None = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[IdeaResponse]:
    """The caller's own ideas, newest first."""
    ideas = await list_user_ideas(db, user.id, status.value if status else None)
    return [idea_response(i) for i in ideas]


@router.get("/{idea_id}", response_model=IdeaResponse)
async def read_idea(
    idea_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> IdeaResponse:
    """One idea. Visible to its author and to administrators."""
    row = await get_idea_with_author(db, idea_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Idea not found")
    idea, profile = row
    if idea.user_id != user.id and not await has_role(db, user.id, ROLE_ADMIN):
        raise HTTPException(status_code=404, detail="Idea not found")
    return idea_response(idea, profile)


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------


@admin_router.get("", response_model=IdeaListResponse)
async def admin_list_ideas(
    status: IdeaStatus | None = Query(None),
    category: IdeaCategory | None = Query(None),
    search: str | None = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> IdeaListResponse:
    """Review queue: every idea with its author."""
    rows, total = await list_ideas(
        db,
        status=status.value if status else None,
        category=category.value if category else None,
        search=search or None,
        page=page,
        per_page=per_page,
    )
    return IdeaListResponse(
        ideas=[idea_response(idea, profile) for idea, profile in rows],
        total=total,
        page=page,
        per_page=per_page,
    )


@admin_router.post("/{idea_id}/evaluate", response_model=EvaluateIdeaResponse)
async def admin_evaluate_idea(
    idea_id: str,
    body: EvaluateIdeaRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> EvaluateIdeaResponse:
    """Set status, approval points and feedback; notify the author on change."""
    try:
        result = await evaluate_idea(
            db,
            idea_id,
            admin.id,
            status=body.status.value,
            points=body.points,
            feedback=body.feedback,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()

    notified = False
    if result.status_changed:
        if result.activity is not None:
            await publish_activity_created(result.activity.id)
        notified = await notify_status_change(db, result.idea, result.previous_status, result.points_granted)

    row = await get_idea_with_author(db, idea_id)
    profile = row[1] if row else None
    return EvaluateIdeaResponse(
        idea=idea_response(result.idea, profile),
        previous_status=result.previous_status,
        status_changed=result.status_changed,
        points_granted=result.points_granted,
        notification_sent=notified,
    )


@admin_router.post("/{idea_id}/implement", response_model=IdeaResponse)
async def admin_implement_idea(
    idea_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> IdeaResponse:
    """Mark an approved idea as implemented."""
    try:
        idea, activity = await implement_idea(db, idea_id, admin.id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    await db.commit()
    await publish_activity_created(activity.id)
    return idea_response(idea)
