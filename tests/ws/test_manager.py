"""Unit tests for WebSocket ConnectionManager."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from ecoideias.ws.manager import ACTIVITIES_CHANNEL, VALID_CHANNELS, ConnectionManager


@pytest.fixture
def mgr() -> ConnectionManager:
    """Fresh ConnectionManager for each test."""
    return ConnectionManager()


def _make_ws(*, fail_send: bool = False) -> MagicMock:
    """Create a mock WebSocket."""
    ws = AsyncMock()
    ws.accept = AsyncMock()
    if fail_send:
        ws.send_text = AsyncMock(side_effect=RuntimeError("connection closed"))
    else:
        ws.send_text = AsyncMock()
    return ws


def test_activities_is_the_only_channel() -> None:
    assert VALID_CHANNELS == {"activities"}


class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_registers_client(self, mgr: ConnectionManager) -> None:
        ws = _make_ws()
        await mgr.connect(ws, "conn-1", user_id="user-1")
        ws.accept.assert_awaited_once()
        assert mgr.connection_count == 1
        assert mgr.get_stats()["total_connections"] == 1

    @pytest.mark.asyncio
    async def test_disconnect_cleans_up(self, mgr: ConnectionManager) -> None:
        await mgr.connect(_make_ws(), "conn-1", user_id="user-1")
        await mgr.subscribe("conn-1", ACTIVITIES_CHANNEL)
        await mgr.disconnect("conn-1")
        assert mgr.connection_count == 0
        assert mgr.subscriber_count(ACTIVITIES_CHANNEL) == 0
        assert ACTIVITIES_CHANNEL not in mgr.get_stats()["channels"]

    @pytest.mark.asyncio
    async def test_disconnect_nonexistent(self, mgr: ConnectionManager) -> None:
        """Disconnecting a nonexistent conn_id is a no-op."""
        await mgr.disconnect("nonexistent")
        assert mgr.connection_count == 0


class TestSubscribe:
    @pytest.mark.asyncio
    async def test_subscribe_valid_channel(self, mgr: ConnectionManager) -> None:
        await mgr.connect(_make_ws(), "conn-1", user_id="user-1")
        assert await mgr.subscribe("conn-1", ACTIVITIES_CHANNEL) is True
        assert mgr.get_stats()["channels"][ACTIVITIES_CHANNEL] == 1

    @pytest.mark.asyncio
    async def test_subscribe_invalid_channel(self, mgr: ConnectionManager) -> None:
        await mgr.connect(_make_ws(), "conn-1", user_id="user-1")
        assert await mgr.subscribe("conn-1", "space") is False
        assert mgr.subscriber_count("space") == 0

    @pytest.mark.asyncio
    async def test_subscribe_unknown_connection(self, mgr: ConnectionManager) -> None:
        assert await mgr.subscribe("ghost", ACTIVITIES_CHANNEL) is False

    @pytest.mark.asyncio
    async def test_unsubscribe(self, mgr: ConnectionManager) -> None:
        await mgr.connect(_make_ws(), "conn-1", user_id="user-1")
        await mgr.subscribe("conn-1", ACTIVITIES_CHANNEL)
        assert await mgr.unsubscribe("conn-1", ACTIVITIES_CHANNEL) is True
        assert mgr.subscriber_count(ACTIVITIES_CHANNEL) == 0


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_broadcast_reaches_subscribers_only(self, mgr: ConnectionManager) -> None:
        subscribed = _make_ws()
        idle = _make_ws()
        await mgr.connect(subscribed, "conn-1", user_id="user-1")
        await mgr.connect(idle, "conn-2", user_id="user-2")
        await mgr.subscribe("conn-1", ACTIVITIES_CHANNEL)

        sent = await mgr.broadcast_to_channel(ACTIVITIES_CHANNEL, {"type": "activities", "items": []})

        assert sent == 1
        payload = json.loads(subscribed.send_text.call_args.args[0])
        assert payload == {"channel": "activities", "data": {"type": "activities", "items": []}}
        idle.send_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_broadcast_empty_channel(self, mgr: ConnectionManager) -> None:
        assert await mgr.broadcast_to_channel(ACTIVITIES_CHANNEL, {"type": "activities"}) == 0

    @pytest.mark.asyncio
    async def test_failed_send_drops_connection(self, mgr: ConnectionManager) -> None:
        good = _make_ws()
        bad = _make_ws(fail_send=True)
        await mgr.connect(good, "conn-1", user_id="user-1")
        await mgr.connect(bad, "conn-2", user_id="user-2")
        await mgr.subscribe("conn-1", ACTIVITIES_CHANNEL)
        await mgr.subscribe("conn-2", ACTIVITIES_CHANNEL)

        sent = await mgr.broadcast_to_channel(ACTIVITIES_CHANNEL, {"type": "activities"})

        assert sent == 1
        assert mgr.connection_count == 1
        assert mgr.subscriber_count(ACTIVITIES_CHANNEL) == 1
