"""WebSocket endpoint with JWT authentication and channel subscriptions."""

import json
import uuid

import jwt
import structlog
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from ecoideias.activity.realtime import refresh_activity_feed
from ecoideias.auth.jwt import verify_token
from ecoideias.auth.service import get_user_by_id
from ecoideias.database import get_session_factory
from ecoideias.ws.manager import ACTIVITIES_CHANNEL, manager

logger = structlog.get_logger()

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str = Query(...),
) -> None:
    """Single WebSocket endpoint authenticated by the access token of an active account.

    Protocol:
        Client -> Server:
            {"action": "subscribe", "channel": "activities"}
            {"action": "unsubscribe", "channel": "activities"}
            {"action": "ping"}

        Server -> Client:
            {"channel": "activities", "data": {"type": "activities", "items": [...]}}
            {"type": "pong"}
            {"type": "error", "message": "..."}
            {"type": "subscribed", "channel": "activities"}
            {"type": "unsubscribed", "channel": "activities"}
    """
    try:
        payload = verify_token(token, expected_type="access")
    except jwt.InvalidTokenError:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    user_id = str(payload["sub"])
    async with get_session_factory()() as db:
        user = await get_user_by_id(db, user_id)
    if user is None or not user.is_active:
        logger.info("ws_auth_rejected", user_id=user_id)
        await websocket.close(code=4001, reason="Authentication failed")
        return

    conn_id = str(uuid.uuid4())
    await manager.connect(websocket, conn_id, user_id)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue

            action = msg.get("action")

            if action == "subscribe":
                channel = msg.get("channel", "")
                ok = await manager.subscribe(conn_id, channel)
                if ok:
                    await websocket.send_json({"type": "subscribed", "channel": channel})
                    if channel == ACTIVITIES_CHANNEL:
                        await refresh_activity_feed()
                else:
                    await websocket.send_json({
                        "type": "error",
                        "message": f"Invalid channel: {channel}",
                    })

            elif action == "unsubscribe":
                channel = msg.get("channel", "")
                await manager.unsubscribe(conn_id, channel)
                await websocket.send_json({"type": "unsubscribed", "channel": channel})

            elif action == "ping":
                await websocket.send_json({"type": "pong"})

            else:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown action: {action}",
                })

    except WebSocketDisconnect:
        await manager.disconnect(conn_id)
    except Exception:
        logger.exception("ws_error", conn_id=conn_id)
        await manager.disconnect(conn_id)
