"""Platform settings: point values and the notification toggle."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.db.models import UserPoints

pytestmark = pytest.mark.asyncio

SETTINGS_URL = "/api/v1/admin/settings"


async def test_defaults_created_on_first_read(client: AsyncClient, admin) -> None:
    response = await client.get(SETTINGS_URL, headers=admin.headers)
    assert response.status_code == 200
    data = response.json()
    assert data["points_per_submission"] == 10
    assert data["points_per_approval"] == 100
    assert data["points_per_implementation"] == 50
    assert data["notify_status_changes"] is True


async def test_partial_update(client: AsyncClient, admin) -> None:
    response = await client.patch(SETTINGS_URL, headers=admin.headers, json={"points_per_approval": 200})
    assert response.status_code == 200
    data = response.json()
    assert data["points_per_approval"] == 200
    assert data["points_per_submission"] == 10

    reread = await client.get(SETTINGS_URL, headers=admin.headers)
    assert reread.json()["points_per_approval"] == 200


async def test_negative_points_rejected(client: AsyncClient, admin) -> None:
    response = await client.patch(SETTINGS_URL, headers=admin.headers, json={"points_per_submission": -5})
    assert response.status_code == 422


async def test_admin_only(client: AsyncClient, user) -> None:
    assert (await client.get(SETTINGS_URL, headers=user.headers)).status_code == 403
    assert (await client.patch(SETTINGS_URL, headers=user.headers, json={})).status_code == 403


async def test_new_submission_value_applies(
    client: AsyncClient, db_session: AsyncSession, admin, user,
) -> None:
    await client.patch(SETTINGS_URL, headers=admin.headers, json={"points_per_submission": 25})

    response = await client.post("/api/v1/ideas", headers=user.headers, json={
        "title": "Bicicletário",
        "description": "Criar um bicicletário coberto no estacionamento.",
        "category": "transport",
    })
    assert response.status_code == 201

    db_session.expire_all()
    points = (await db_session.execute(select(UserPoints).where(UserPoints.user_id == user.id))).scalar_one()
    assert points.total_points == 25
