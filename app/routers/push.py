# app/routers/push.py
"""
WS /ws — incident push channel.

Protocol:
  client → {"type": "identify", "userId": 42}
  server → {"type": "identified", "userId": 42}
  server → {"type": "new_incident" | "incident_update" | "incident_status_change", "incident": {...}}
  server → {"type": "error", "detail": "..."}

The upgrade may carry ?token=<jwt>; the channel is then bound to that user and
a mismatching identify is refused. Without a token the client-supplied id is
only trusted when WS_TRUST_CLIENT_IDENTITY is enabled.
"""

import json
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from app.config import settings
from app.schemas.push import IdentifyMessage
from app.services.connection_registry import ConnectionRegistry
from app.utils.logger import get_logger
from app.utils.security import decode_access_token

router = APIRouter()
logger = get_logger(__name__)


async def _send_error(websocket: WebSocket, detail: str):
    await websocket.send_text(json.dumps({"type": "error", "detail": detail}))


async def _handle_identify(websocket: WebSocket, registry: ConnectionRegistry,
                           data: dict, bound_user: Optional[int]):
    try:
        message = IdentifyMessage.model_validate(data)
    except ValidationError:
        await _send_error(websocket, "identify requires an integer userId")
        return

    if bound_user is not None and message.user_id != bound_user:
        logger.warning(f"[WS] Channel of user {bound_user} tried to identify as {message.user_id} — refused")
        await _send_error(websocket, "userId does not match the authenticated user")
        return

    registry.identify(websocket, message.user_id)
    logger.info(f"[WS] User {message.user_id} identified ({len(registry)} open channels)")
    await websocket.send_text(json.dumps({"type": "identified", "userId": message.user_id}))


@router.websocket("/ws")
async def push_channel(websocket: WebSocket, token: Optional[str] = None):
    registry: ConnectionRegistry = websocket.app.state.registry

    bound_user = None
    if token is not None:
        bound_user = decode_access_token(token)
        if bound_user is None:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            logger.warning("[WS] Rejected channel with invalid token")
            return
    elif not settings.WS_TRUST_CLIENT_IDENTITY:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        logger.warning("[WS] Rejected channel without token")
        return

    await websocket.accept()
    registry.connect(websocket)
    if bound_user is not None:
        registry.identify(websocket, bound_user)
    logger.info(f"[WS] Channel open (user={bound_user}, {len(registry)} open channels)")

    try:
        while True:
            raw = await websocket.receive_text()
            logger.debug(f"[WS] ← {raw}")
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                await _send_error(websocket, "Malformed JSON")
                continue
            if not isinstance(data, dict):
                await _send_error(websocket, "Message must be a JSON object")
                continue

            if data.get("type") == "identify":
                await _handle_identify(websocket, registry, data, bound_user)
            else:
                await _send_error(websocket, f"Unknown message type: {data.get('type')!r}")
    except WebSocketDisconnect:
        pass
    finally:
        user_id = registry.disconnect(websocket)
        logger.info(f"[WS] Channel closed (user={user_id}, {len(registry)} open channels)")
