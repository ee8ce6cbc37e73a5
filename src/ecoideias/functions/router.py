"""Function endpoints under /functions/v1.

Each handler authenticates the caller with the bearer token, performs one
action (AI call, export, email) and answers JSON or CSV. Preflight requests
are answered by the CORS middleware.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.ai.analysis import analyze_idea, ask_assistant
from ecoideias.ai.client import AIClient, get_ai_client
from ecoideias.auth.dependencies import get_current_user, require_admin
from ecoideias.auth.roles import ROLE_ADMIN
from ecoideias.auth.service import has_role
from ecoideias.config import get_settings
from ecoideias.database import get_session
from ecoideias.db.models import User
from ecoideias.email.service import get_email_service
from ecoideias.errors import EmailDeliveryError
from ecoideias.functions.schemas import (
    AnalyzeIdeaRequest,
    AnalyzeIdeaResponse,
    ChatRequest,
    ChatResponse,
    StatusNotificationRequest,
    StatusNotificationResponse,
)
from ecoideias.platform.service import get_platform_settings
from ecoideias.reports.schemas import ExportRequest
from ecoideias.reports.service import (
    export_filename,
    query_ideas_for_export,
    to_csv,
    to_json_payload,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/functions/v1", tags=["Functions"])


@router.post("/ai-analyze-idea", response_model=AnalyzeIdeaResponse)
async def ai_analyze_idea(
    body: AnalyzeIdeaRequest,
    user: User = Depends(get_current_user),
    client: AIClient = Depends(get_ai_client),
) -> AnalyzeIdeaResponse:
    """Improvement suggestions plus a similarity check against existing ideas."""
    result = await analyze_idea(
        client,
        title=body.title,
        description=body.description,
        category=body.category,
        existing_ideas=[i.model_dump() for i in body.existingIdeas],
    )
    logger.info(
        "ai_analysis_complete",
        user_id=user.id,
        suggestions=len(result["suggestions"]),
        similar=len(result["similarIdeas"]),
    )
    return AnalyzeIdeaResponse(**result)


@router.post("/export-ideas", response_model=None)
async def export_ideas(
    body: ExportRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response | dict:
    """Filtered idea export as CSV (default) or JSON.

    Administrators export every idea; other users only their own.
    """
    owner_id = None if await has_role(db, user.id, ROLE_ADMIN) else user.id
    try:
        rows = await query_ideas_for_export(db, body.filters, owner_id=owner_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    logger.info("ideas_exported", user_id=user.id, format=body.format, rows=len(rows))

    if body.format == "json":
        return to_json_payload(rows)

    settings = get_settings()
    return Response(
        content=to_csv(rows, settings.report_timezone),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.post("/send-status-notification", response_model=StatusNotificationResponse)
async def send_status_notification(
    body: StatusNotificationRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> StatusNotificationResponse:
    """Email an idea's author about a status change (admin only)."""
    platform = await get_platform_settings(db)
    message_id = await get_email_service().send_template(
        to=body.email,
        template_name="status_update",
        context={
            "user_name": body.userName,
            "idea_title": body.ideaTitle,
            "old_status": body.oldStatus,
            "new_status": body.newStatus,
            "approval_points": platform.points_per_approval,
        },
    )
    if message_id is None:
        raise EmailDeliveryError("Failed to send notification")

    logger.info("status_notification_sent", admin_id=admin.id, message_id=message_id)
    return StatusNotificationResponse(success=True, data={"id": message_id})


@router.post("/sustainability-ai", response_model=ChatResponse)
async def sustainability_ai(
    body: ChatRequest,
    user: User = Depends(get_current_user),
    client: AIClient = Depends(get_ai_client),
) -> ChatResponse:
    """Sustainability assistant chat."""
    client.ensure_configured()
    if not body.message or not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    reply = await ask_assistant(client, body.message)
    logger.info("ai_chat_answered", user_id=user.id)
    return ChatResponse(reply=reply)
