"""Ranking and activity panels over HTTP."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from ecoideias.activity.service import record_activity
from ecoideias.config import get_settings
from ecoideias.ideas.constants import ActivityType
from ecoideias.points.service import award_approval, award_submission

pytestmark = pytest.mark.asyncio


async def _seed_points(db: AsyncSession, user_id: str, total: int, approved: int = 0) -> None:
    await award_submission(db, user_id, total)
    for _ in range(approved):
        await award_approval(db, user_id, 0)


class TestRanking:
    async def test_requires_auth(self, client: AsyncClient) -> None:
        assert (await client.get("/api/v1/ranking")).status_code == 401

    async def test_top_ten_order_and_icons(self, client: AsyncClient, db_session: AsyncSession, make_account) -> None:
        accounts = []
        for n in range(12):
            accounts.append(await make_account(f"pessoa{n}@example.com", f"Pessoa {n}"))
        for n, account in enumerate(accounts):
            await _seed_points(db_session, account.id, total=(n + 1) * 10)
        await db_session.commit()

        response = await client.get("/api/v1/ranking", headers=accounts[0].headers)
        assert response.status_code == 200
        entries = response.json()["entries"]

        assert len(entries) == 10
        assert [e["total_points"] for e in entries] == [120, 110, 100, 90, 80, 70, 60, 50, 40, 30]
        assert [e["position"] for e in entries] == list(range(1, 11))
        assert [e["rank_icon"] for e in entries[:4]] == ["trophy", "medal", "award", None]
        assert entries[3]["rank_label"] == "#4"
        assert entries[0]["name"] == "Pessoa 11"
        assert entries[0]["initials"] == "P1"

    async def test_ties_broken_by_approvals(
        self, client: AsyncClient, db_session: AsyncSession, make_account,
    ) -> None:
        fewer = await make_account("fewer@example.com", "Poucas Aprovações")
        more = await make_account("more@example.com", "Muitas Aprovações")
        await _seed_points(db_session, fewer.id, total=100, approved=1)
        await _seed_points(db_session, more.id, total=100, approved=3)
        await db_session.commit()

        entries = (await client.get("/api/v1/ranking", headers=fewer.headers)).json()["entries"]
        assert [e["user_id"] for e in entries] == [more.id, fewer.id]

    async def test_limit_parameter(self, client: AsyncClient, db_session: AsyncSession, make_account) -> None:
        first = await make_account("a@example.com", "Ana")
        second = await make_account("b@example.com", "Bruno")
        await _seed_points(db_session, first.id, total=5)
        await _seed_points(db_session, second.id, total=7)
        await db_session.commit()

        entries = (await client.get("/api/v1/ranking", headers=first.headers, params={"limit": 1})).json()["entries"]
        assert [e["name"] for e in entries] == ["Bruno"]

        too_big = await client.get("/api/v1/ranking", headers=first.headers, params={"limit": 500})
        assert too_big.status_code == 422

    async def test_default_limit_from_settings(
        self, client: AsyncClient, db_session: AsyncSession, make_account, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        accounts = [await make_account(f"p{n}@example.com", f"Pessoa {n}") for n in range(3)]
        for n, account in enumerate(accounts):
            await _seed_points(db_session, account.id, total=(n + 1) * 10)
        await db_session.commit()

        monkeypatch.setenv("ECO_RANKING_DEFAULT_LIMIT", "2")
        get_settings.cache_clear()

        entries = (await client.get("/api/v1/ranking", headers=accounts[0].headers)).json()["entries"]
        assert [e["total_points"] for e in entries] == [30, 20]


class TestActivityFeed:
    async def test_latest_first_with_texts(self, client: AsyncClient, db_session: AsyncSession, user) -> None:
        await record_activity(db_session, user.id, ActivityType.IDEA_CREATED, "idea-1", "Cisternas")
        await record_activity(db_session, user.id, ActivityType.IDEA_REJECTED, "idea-1", "Cisternas")
        await db_session.commit()

        response = await client.get("/api/v1/activities", headers=user.headers)
        assert response.status_code == 200
        items = response.json()["items"]
        assert [i["text"] for i in items] == [
            'A ideia "Cisternas" de Maria Silva foi reprovada',
            'Maria Silva criou a ideia "Cisternas"',
        ]
        assert [i["icon"] for i in items] == ["x-circle", "lightbulb"]
        assert items[0]["metadata"]["title"] == "Cisternas"

    async def test_limit(self, client: AsyncClient, db_session: AsyncSession, user) -> None:
        for n in range(4):
            await record_activity(db_session, user.id, ActivityType.IDEA_CREATED, f"idea-{n}", f"Ideia {n}")
        await db_session.commit()

        items = (await client.get("/api/v1/activities", headers=user.headers, params={"limit": 2})).json()["items"]
        assert [i["title"] for i in items] == ["Ideia 3", "Ideia 2"]

    async def test_submission_appears_in_feed(self, client: AsyncClient, user) -> None:
        await client.post("/api/v1/ideas", headers=user.headers, json={
            "title": "Compostagem no refeitório",
            "description": "Transformar restos de comida em adubo para o jardim.",
            "category": "waste",
        })
        items = (await client.get("/api/v1/activities", headers=user.headers)).json()["items"]
        assert items[0]["text"] == 'Maria Silva criou a ideia "Compostagem no refeitório"'
