"""Tests for the Redis pub/sub to WebSocket bridge."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ecoideias.activity.realtime import ACTIVITY_CREATED_CHANNEL
from ecoideias.ws.bridge import PubSubBridge


def _mock_redis(messages: list[dict | None]) -> tuple[MagicMock, AsyncMock]:
    mock_pubsub = AsyncMock()
    queue = list(messages)

    async def fake_get_message(**kwargs):
        await asyncio.sleep(0.01)
        return queue.pop(0) if queue else None

    mock_pubsub.get_message = fake_get_message
    mock_pubsub.subscribe = AsyncMock()
    mock_pubsub.unsubscribe = AsyncMock()
    mock_pubsub.aclose = AsyncMock()
    mock_redis = MagicMock()
    mock_redis.pubsub = MagicMock(return_value=mock_pubsub)
    return mock_redis, mock_pubsub


async def _run_briefly(bridge: PubSubBridge) -> None:
    async def stop_after_delay() -> None:
        await asyncio.sleep(0.1)
        await bridge.stop()

    await asyncio.gather(bridge.start(), stop_after_delay())


class TestBridgeLifecycle:
    @pytest.mark.asyncio
    async def test_announcement_triggers_refresh(self) -> None:
        mock_redis, mock_pubsub = _mock_redis([
            {"type": "message", "channel": ACTIVITY_CREATED_CHANNEL, "data": json.dumps({"id": "act-1"})},
            None,
        ])
        bridge = PubSubBridge(mock_redis)

        with patch("ecoideias.ws.bridge.refresh_activity_feed", AsyncMock(return_value=1)) as refresh:
            await _run_briefly(bridge)

        mock_pubsub.subscribe.assert_awaited_once_with(ACTIVITY_CREATED_CHANNEL)
        refresh.assert_awaited_once()
        mock_pubsub.unsubscribe.assert_awaited_once()
        mock_pubsub.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_message_skipped(self) -> None:
        """Non-JSON pub/sub message is logged and skipped, not crash."""
        mock_redis, _ = _mock_redis([
            {"type": "message", "channel": ACTIVITY_CREATED_CHANNEL, "data": "not valid json {{{"},
        ])
        bridge = PubSubBridge(mock_redis)

        with patch("ecoideias.ws.bridge.refresh_activity_feed", AsyncMock(return_value=0)) as refresh:
            await _run_briefly(bridge)

        refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_bridge_running(self) -> None:
        mock_redis, _ = _mock_redis([
            {"type": "message", "channel": ACTIVITY_CREATED_CHANNEL, "data": b'{"id": "act-1"}'},
            {"type": "message", "channel": ACTIVITY_CREATED_CHANNEL, "data": b'{"id": "act-2"}'},
        ])
        bridge = PubSubBridge(mock_redis)

        refresh = AsyncMock(side_effect=[RuntimeError("db down"), 1])
        with patch("ecoideias.ws.bridge.refresh_activity_feed", refresh):
            await _run_briefly(bridge)

        assert refresh.await_count == 2
