"""Bridges Redis pub/sub to WebSocket clients.

Listens for activity announcements published by any API process and
refreshes the activity panel of the clients connected to this one.
"""

import asyncio
import json

import redis.asyncio as aioredis
import structlog

from ecoideias.activity.realtime import ACTIVITY_CREATED_CHANNEL, refresh_activity_feed

logger = structlog.get_logger()


class PubSubBridge:
    """Subscribes to Redis pub/sub and pushes refreshed feeds to WebSocket clients."""

    def __init__(self, redis_client: aioredis.Redis) -> None:
        self.redis = redis_client
        self._running = False

    async def start(self) -> None:
        """Start listening to the activity channel."""
        self._running = True
        pubsub = self.redis.pubsub()
        await pubsub.subscribe(ACTIVITY_CREATED_CHANNEL)
        logger.info("pubsub_bridge_started", channels=[ACTIVITY_CREATED_CHANNEL])

        try:
            while self._running:
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=1.0,
                )
                if message is None:
                    continue

                try:
                    data = message.get("data", b"")
                    if isinstance(data, bytes):
                        data = data.decode()
                    payload = json.loads(data)
                except (json.JSONDecodeError, UnicodeDecodeError):
                    logger.warning("pubsub_invalid_message", channel=ACTIVITY_CREATED_CHANNEL)
                    continue

                try:
                    sent = await refresh_activity_feed()
                except Exception:
                    logger.exception("activity_refresh_failed", activity_id=payload.get("id"))
                    continue

                if sent > 0:
                    logger.debug("pubsub_broadcast", activity_id=payload.get("id"), recipients=sent)

        except asyncio.CancelledError:
            pass
        finally:
            await pubsub.unsubscribe()
            await pubsub.aclose()
            logger.info("pubsub_bridge_stopped")

    async def stop(self) -> None:
        """Signal the bridge to stop."""
        self._running = False
