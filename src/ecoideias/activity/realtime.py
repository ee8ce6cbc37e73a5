"""Realtime refresh of the activity panel.

A committed activity insert is announced on Redis; whoever receives the
announcement re-fetches the whole latest list and pushes it to the
``activities`` WebSocket channel. There is no incremental merge.
"""

from __future__ import annotations

import json

import structlog
from redis.exceptions import RedisError

from ecoideias.activity.service import get_recent_activities
from ecoideias.config import get_settings
from ecoideias.database import get_session_factory
from ecoideias.redis_client import get_redis, redis_available
from ecoideias.ws.manager import ACTIVITIES_CHANNEL, manager

logger = structlog.get_logger()

ACTIVITY_CREATED_CHANNEL = "pubsub:activity_created"


async def refresh_activity_feed() -> int:
    """Re-fetch the latest activities and broadcast them. Returns the recipient count."""
    if manager.subscriber_count(ACTIVITIES_CHANNEL) == 0:
        return 0

    limit = get_settings().activity_feed_limit
    async with get_session_factory()() as db:
        items = await get_recent_activities(db, limit)

    sent = await manager.broadcast_to_channel(ACTIVITIES_CHANNEL, {
        "type": "activities",
        "items": [item.model_dump(mode="json") for item in items],
    })
    logger.debug("activity_broadcast", items=len(items), recipients=sent)
    return sent


async def publish_activity_created(activity_id: str) -> None:
    """Announce a committed activity insert.

    Publishes on Redis so every API process refreshes its own clients; without
    Redis the refresh runs in this process. Failures are logged, never raised.
    """
    if redis_available():
        try:
            await get_redis().publish(ACTIVITY_CREATED_CHANNEL, json.dumps({"id": activity_id}))
            return
        except (RedisError, OSError):
            logger.warning("activity_publish_failed", activity_id=activity_id, exc_info=True)

    try:
        await refresh_activity_feed()
    except Exception:
        logger.exception("activity_refresh_failed", activity_id=activity_id)
