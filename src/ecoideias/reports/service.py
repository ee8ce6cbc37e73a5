"""Idea reports: filtered query and CSV / JSON serialization."""

from __future__ import annotations

import csv
import io
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.auth.service import as_utc
from ecoideias.db.models import Idea, Profile
from ecoideias.reports.schemas import ExportFilters

CSV_HEADER = ["ID", "Título", "Descrição", "Categoria", "Impacto", "Status", "Usuário", "Email", "Data Criação"]

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def parse_date_bound(value: str | None) -> tuple[datetime | None, bool]:
    """
    Parse a filter date.

    Returns (datetime in UTC, is_date_only). Naive timestamps are taken as UTC.

    Raises:
        ValueError: If the value is neither a date nor an ISO timestamp.
    """
    value = (value or "").strip()
    if not value:
        return None, False
    try:
        if _DATE_ONLY.match(value):
            return datetime.combine(date.fromisoformat(value), time.min, tzinfo=timezone.utc), True
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        msg = f"Invalid date: {value}"
        raise ValueError(msg) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc), False


async def query_ideas_for_export(
    db: AsyncSession,
    filters: ExportFilters,
    owner_id: str | None = None,
) -> list[tuple[Idea, Profile | None]]:
    """
    Ideas matching the filters with their author profiles, newest first.

    Each filter applies independently. The start date is inclusive; an end date
    without a time includes that whole day. ``owner_id`` restricts the export
    to one author.
    """
    query = (
        select(Idea, Profile)
        .outerjoin(Profile, Profile.user_id == Idea.user_id)
        .order_by(Idea.created_at.desc())
    )
    if owner_id is not None:
        query = query.where(Idea.user_id == owner_id)
    if filters.status:
        query = query.where(Idea.status == filters.status)
    if filters.category:
        query = query.where(Idea.category == filters.category)

    start, _ = parse_date_bound(filters.start_date)
    if start is not None:
        query = query.where(Idea.created_at >= start)

    end, end_is_date = parse_date_bound(filters.end_date)
    if end is not None:
        if end_is_date:
            query = query.where(Idea.created_at < end + timedelta(days=1))
        else:
            query = query.where(Idea.created_at <= end)

    result = await db.execute(query)
    return [(idea, profile) for idea, profile in result.all()]


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def format_br_datetime(value: datetime, tz_name: str = "America/Sao_Paulo") -> str:
    """Render a timestamp the way pt-BR locales print it: ``DD/MM/YYYY, HH:MM:SS``."""
    return as_utc(value).astimezone(ZoneInfo(tz_name)).strftime("%d/%m/%Y, %H:%M:%S")


def to_csv(rows: list[tuple[Idea, Profile | None]], tz_name: str = "America/Sao_Paulo") -> str:
    """Serialize ideas to CSV text, one line per idea, without a trailing newline."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for idea, profile in rows:
        writer.writerow([
            idea.id,
            idea.title,
            idea.description,
            idea.category,
            idea.impact or "",
            idea.status,
            profile.name if profile else "",
            profile.email if profile else "",
            format_br_datetime(idea.created_at, tz_name),
        ])
    text = buffer.getvalue()
    return text[:-1] if text.endswith("\n") else text


def _iso(value: datetime | None) -> str | None:
    return as_utc(value).isoformat() if value is not None else None


def to_json_payload(rows: list[tuple[Idea, Profile | None]]) -> dict[str, Any]:
    """Serialize ideas to ``{"ideas": [...]}`` with the author nested under ``profile``."""
    return {
        "ideas": [
            {
                "id": idea.id,
                "user_id": idea.user_id,
                "title": idea.title,
                "description": idea.description,
                "category": idea.category,
                "impact": idea.impact,
                "status": idea.status,
                "points_awarded": idea.points_awarded,
                "feedback": idea.feedback,
                "evaluated_at": _iso(idea.evaluated_at),
                "implemented_at": _iso(idea.implemented_at),
                "created_at": _iso(idea.created_at),
                "updated_at": _iso(idea.updated_at),
                "profile": {"name": profile.name, "email": profile.email} if profile else None,
            }
            for idea, profile in rows
        ]
    }


def export_filename(now: datetime | None = None) -> str:
    """``ideias_<ISO timestamp>.csv`` in UTC with millisecond precision."""
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"ideias_{stamp}.csv"
