"""Frontend route resolution over HTTP."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

RESOLVE = "/api/v1/navigation/resolve"


async def test_anonymous_redirected_to_login(client: AsyncClient) -> None:
    response = await client.get(RESOLVE, params={"path": "/dashboard"})
    assert response.status_code == 200
    assert response.json() == {
        "action": "redirect",
        "location": "/",
        "route": "/dashboard",
        "params": {},
        "state": {"from": "/dashboard"},
    }


async def test_public_page_renders_for_anyone(client: AsyncClient) -> None:
    response = await client.get(RESOLVE, params={"path": "/forgot-password"})
    assert response.json()["action"] == "render"


async def test_user_on_user_page(client: AsyncClient, user) -> None:
    response = await client.get(RESOLVE, params={"path": "/new-idea"}, headers=user.headers)
    data = response.json()
    assert data["action"] == "render"
    assert data["location"] == "/new-idea"


async def test_user_kept_out_of_admin_pages(client: AsyncClient, user) -> None:
    response = await client.get(RESOLVE, params={"path": "/admin/users"}, headers=user.headers)
    data = response.json()
    assert data["action"] == "redirect"
    assert data["location"] == "/dashboard"


async def test_admin_sent_to_admin_home(client: AsyncClient, admin) -> None:
    response = await client.get(RESOLVE, params={"path": "/dashboard"}, headers=admin.headers)
    data = response.json()
    assert data["action"] == "redirect"
    assert data["location"] == "/admin"


async def test_admin_route_params(client: AsyncClient, admin) -> None:
    response = await client.get(RESOLVE, params={"path": "/admin/ideas/abc-123/evaluate"}, headers=admin.headers)
    data = response.json()
    assert data["action"] == "render"
    assert data["route"] == "/admin/ideas/:ideaId/evaluate"
    assert data["params"] == {"ideaId": "abc-123"}


async def test_invalid_token_treated_as_anonymous(client: AsyncClient) -> None:
    response = await client.get(
        RESOLVE, params={"path": "/admin"}, headers={"Authorization": "Bearer not-a-token"},
    )
    data = response.json()
    assert data["action"] == "redirect"
    assert data["location"] == "/"


async def test_unknown_path(client: AsyncClient) -> None:
    response = await client.get(RESOLVE, params={"path": "/nao-existe"})
    assert response.json()["action"] == "not_found"


async def test_path_required(client: AsyncClient) -> None:
    response = await client.get(RESOLVE)
    assert response.status_code == 422
