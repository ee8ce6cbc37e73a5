"""Idea submission and the admin evaluation workflow."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.db.models import Activity, UserPoints

pytestmark = pytest.mark.asyncio

IDEA = {
    "title": "Painéis solares no galpão",
    "description": "Instalar painéis fotovoltaicos no telhado do galpão principal.",
    "category": "energy",
    "impact": "Redução de 30% na conta de luz",
}


async def _points(db: AsyncSession, user_id: str) -> UserPoints:
    db.expire_all()
    result = await db.execute(select(UserPoints).where(UserPoints.user_id == user_id))
    return result.scalar_one()


async def _activity_types(db: AsyncSession) -> list[str]:
    result = await db.execute(select(Activity.action_type).order_by(Activity.created_at))
    return list(result.scalars().all())


async def _evaluate(client: AsyncClient, admin, idea_id: str, **body) -> dict:
    response = await client.post(f"/api/v1/admin/ideas/{idea_id}/evaluate", headers=admin.headers, json=body)
    assert response.status_code == 200, response.text
    return response.json()


class TestSubmission:
    async def test_submit_idea(self, client: AsyncClient, db_session: AsyncSession, user) -> None:
        response = await client.post("/api/v1/ideas", headers=user.headers, json=IDEA)
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "Em Análise"
        assert data["category_label"] == "Eficiência Energética"
        assert data["points_awarded"] == 0
        assert data["user_id"] == user.id

        points = await _points(db_session, user.id)
        assert points.total_points == 10
        assert points.ideas_submitted == 1
        assert await _activity_types(db_session) == ["idea_created"]

    async def test_submit_requires_auth(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/ideas", json=IDEA)
        assert response.status_code == 401

    @pytest.mark.parametrize(("field", "value"), [
        ("title", "ab"),
        ("description", "curta"),
        ("category", "space"),
        ("title", "   "),
    ])
    async def test_submit_validation(self, client: AsyncClient, user, field: str, value: str) -> None:
        response = await client.post("/api/v1/ideas", headers=user.headers, json={**IDEA, field: value})
        assert response.status_code == 422

    async def test_my_ideas_newest_first(self, client: AsyncClient, user, other_user, make_idea) -> None:
        await make_idea(user, title="Primeira ideia")
        await make_idea(user, title="Segunda ideia")
        await make_idea(other_user, title="Ideia alheia")

        response = await client.get("/api/v1/ideas/mine", headers=user.headers)
        assert response.status_code == 200
        assert [i["title"] for i in response.json()] == ["Segunda ideia", "Primeira ideia"]

    async def test_my_ideas_status_filter(self, client: AsyncClient, user, make_idea) -> None:
        await make_idea(user, title="Aprovada antes", status="Aprovada")
        await make_idea(user, title="Ainda em análise")

        response = await client.get("/api/v1/ideas/mine", headers=user.headers, params={"status": "Aprovada"})
        assert [i["title"] for i in response.json()] == ["Aprovada antes"]

    async def test_read_idea_visibility(self, client: AsyncClient, user, other_user, admin, make_idea) -> None:
        idea_id = await make_idea(user)

        own = await client.get(f"/api/v1/ideas/{idea_id}", headers=user.headers)
        foreign = await client.get(f"/api/v1/ideas/{idea_id}", headers=other_user.headers)
        as_admin = await client.get(f"/api/v1/ideas/{idea_id}", headers=admin.headers)

        assert own.status_code == 200
        assert foreign.status_code == 404
        assert as_admin.status_code == 200
        assert as_admin.json()["author_name"] == "Maria Silva"


class TestAdminListing:
    async def test_requires_admin(self, client: AsyncClient, user) -> None:
        response = await client.get("/api/v1/admin/ideas", headers=user.headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    async def test_filters_and_pagination(self, client: AsyncClient, admin, user, make_idea) -> None:
        await make_idea(user, title="Cisternas no pátio", category="water")
        await make_idea(user, title="Reuso de água cinza", category="water", status="Aprovada")
        await make_idea(user, title="Carona solidária", category="transport")

        everything = (await client.get("/api/v1/admin/ideas", headers=admin.headers)).json()
        assert everything["total"] == 3
        assert everything["ideas"][0]["title"] == "Carona solidária"
        assert everything["ideas"][0]["author_email"] == "maria@example.com"

        water = (await client.get("/api/v1/admin/ideas", headers=admin.headers, params={"category": "water"})).json()
        assert water["total"] == 2

        approved_water = (await client.get(
            "/api/v1/admin/ideas", headers=admin.headers, params={"category": "water", "status": "Aprovada"},
        )).json()
        assert [i["title"] for i in approved_water["ideas"]] == ["Reuso de água cinza"]

        search = (await client.get("/api/v1/admin/ideas", headers=admin.headers, params={"search": "CISTERNA"})).json()
        assert [i["title"] for i in search["ideas"]] == ["Cisternas no pátio"]

        page = (await client.get("/api/v1/admin/ideas", headers=admin.headers, params={"page": 2, "per_page": 2})).json()
        assert page["total"] == 3
        assert len(page["ideas"]) == 1


class TestEvaluation:
    async def test_approval_awards_points_once(
        self, client: AsyncClient, db_session: AsyncSession, admin, user, make_idea, mock_email_service: MagicMock,
    ) -> None:
        idea_id = await make_idea(user)

        first = await _evaluate(client, admin, idea_id, status="Aprovada", feedback="Ótima ideia")
        assert first["status_changed"] is True
        assert first["previous_status"] == "Em Análise"
        assert first["points_granted"] == 100
        assert first["idea"]["points_awarded"] == 100
        assert first["idea"]["feedback"] == "Ótima ideia"
        assert first["idea"]["approved_at"] is not None
        assert first["notification_sent"] is True

        points = await _points(db_session, user.id)
        assert points.total_points == 110
        assert points.ideas_approved == 1

        # Reject then approve again: no second grant, nothing taken back
        await _evaluate(client, admin, idea_id, status="Reprovada")
        assert (await _points(db_session, user.id)).total_points == 110

        again = await _evaluate(client, admin, idea_id, status="Aprovada", points=500)
        assert again["points_granted"] == 0
        points = await _points(db_session, user.id)
        assert points.total_points == 110
        assert points.ideas_approved == 1

        assert await _activity_types(db_session) == [
            "idea_created", "idea_approved", "idea_rejected", "idea_approved",
        ]

    async def test_custom_points(
        self, client: AsyncClient, db_session: AsyncSession, admin, user, make_idea, mock_email_service: MagicMock,
    ) -> None:
        idea_id = await make_idea(user)
        result = await _evaluate(client, admin, idea_id, status="Aprovada", points=250)
        assert result["points_granted"] == 250
        assert (await _points(db_session, user.id)).total_points == 260

        context = mock_email_service.send_template.call_args.kwargs["context"]
        assert context["approval_points"] == 250

    async def test_zero_point_approval_announces_no_points(
        self, client: AsyncClient, admin, user, make_idea, mock_email_service: MagicMock,
    ) -> None:
        idea_id = await make_idea(user)
        result = await _evaluate(client, admin, idea_id, status="Aprovada", points=0)
        assert result["points_granted"] == 0

        context = mock_email_service.send_template.call_args.kwargs["context"]
        assert context["approval_points"] == 0

    async def test_reapproval_announces_no_points(
        self, client: AsyncClient, admin, user, make_idea, mock_email_service: MagicMock,
    ) -> None:
        idea_id = await make_idea(user)
        await _evaluate(client, admin, idea_id, status="Aprovada")
        await _evaluate(client, admin, idea_id, status="Reprovada")
        await _evaluate(client, admin, idea_id, status="Aprovada")

        context = mock_email_service.send_template.call_args.kwargs["context"]
        assert context["new_status"] == "Aprovada"
        assert context["approval_points"] == 0

    async def test_negative_points_rejected(self, client: AsyncClient, admin, user, make_idea) -> None:
        idea_id = await make_idea(user)
        response = await client.post(
            f"/api/v1/admin/ideas/{idea_id}/evaluate", headers=admin.headers, json={"status": "Aprovada", "points": -5},
        )
        assert response.status_code == 422

    async def test_invalid_status_rejected(self, client: AsyncClient, admin, user, make_idea) -> None:
        idea_id = await make_idea(user)
        response = await client.post(
            f"/api/v1/admin/ideas/{idea_id}/evaluate", headers=admin.headers, json={"status": "Implementada"},
        )
        assert response.status_code == 422

    async def test_unknown_idea(self, client: AsyncClient, admin) -> None:
        response = await client.post(
            "/api/v1/admin/ideas/nope/evaluate", headers=admin.headers, json={"status": "Aprovada"},
        )
        assert response.status_code == 404

    async def test_same_status_only_updates_feedback(
        self, client: AsyncClient, db_session: AsyncSession, admin, user, make_idea, mock_email_service: MagicMock,
    ) -> None:
        idea_id = await make_idea(user)
        result = await _evaluate(client, admin, idea_id, status="Em Análise", feedback="Detalhe o custo")

        assert result["status_changed"] is False
        assert result["notification_sent"] is False
        assert result["idea"]["feedback"] == "Detalhe o custo"
        mock_email_service.send_template.assert_not_awaited()
        assert await _activity_types(db_session) == ["idea_created"]

    async def test_status_email_content(
        self, client: AsyncClient, admin, user, make_idea, mock_email_service: MagicMock,
    ) -> None:
        idea_id = await make_idea(user, title="Hortas comunitárias")
        await _evaluate(client, admin, idea_id, status="Reprovada")

        kwargs = mock_email_service.send_template.call_args.kwargs
        assert kwargs["to"] == "maria@example.com"
        assert kwargs["template_name"] == "status_update"
        assert kwargs["context"]["idea_title"] == "Hortas comunitárias"
        assert kwargs["context"]["old_status"] == "Em Análise"
        assert kwargs["context"]["new_status"] == "Reprovada"

    async def test_notifications_disabled(
        self, client: AsyncClient, admin, user, make_idea, mock_email_service: MagicMock,
    ) -> None:
        await client.patch("/api/v1/admin/settings", headers=admin.headers, json={"notify_status_changes": False})
        idea_id = await make_idea(user)

        result = await _evaluate(client, admin, idea_id, status="Aprovada")
        assert result["notification_sent"] is False
        mock_email_service.send_template.assert_not_awaited()

    async def test_email_failure_does_not_fail_evaluation(
        self, client: AsyncClient, admin, user, make_idea, mock_email_service: MagicMock,
    ) -> None:
        mock_email_service.send_template.side_effect = RuntimeError("smtp down")
        idea_id = await make_idea(user)

        result = await _evaluate(client, admin, idea_id, status="Aprovada")
        assert result["idea"]["status"] == "Aprovada"
        assert result["notification_sent"] is False


class TestImplementation:
    async def test_implement_approved_idea(
        self, client: AsyncClient, db_session: AsyncSession, admin, user, make_idea, mock_email_service: MagicMock,
    ) -> None:
        idea_id = await make_idea(user)
        await _evaluate(client, admin, idea_id, status="Aprovada")

        response = await client.post(f"/api/v1/admin/ideas/{idea_id}/implement", headers=admin.headers)
        assert response.status_code == 200
        assert response.json()["implemented_at"] is not None

        points = await _points(db_session, user.id)
        assert points.total_points == 160
        assert points.ideas_implemented == 1
        assert (await _activity_types(db_session))[-1] == "idea_implemented"

    async def test_implement_twice_conflicts(
        self, client: AsyncClient, admin, user, make_idea, mock_email_service: MagicMock,
    ) -> None:
        idea_id = await make_idea(user)
        await _evaluate(client, admin, idea_id, status="Aprovada")
        await client.post(f"/api/v1/admin/ideas/{idea_id}/implement", headers=admin.headers)

        response = await client.post(f"/api/v1/admin/ideas/{idea_id}/implement", headers=admin.headers)
        assert response.status_code == 409

    async def test_implement_requires_approval(self, client: AsyncClient, admin, user, make_idea) -> None:
        idea_id = await make_idea(user)
        response = await client.post(f"/api/v1/admin/ideas/{idea_id}/implement", headers=admin.headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "Only approved ideas can be implemented"

    async def test_implement_unknown(self, client: AsyncClient, admin) -> None:
        response = await client.post("/api/v1/admin/ideas/nope/implement", headers=admin.headers)
        assert response.status_code == 404
