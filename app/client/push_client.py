# app/client/push_client.py
"""
Incident feed client — keeps a push channel open to the backend's /ws,
identifies the user, and turns incoming incident events into proximity
alerts.

Data flow per message:
  new_incident           → ProximityEvaluator → AlertLifecycleManager.enqueue
  incident_status_change → (closed) AlertLifecycleManager.withdraw
  every incident event   → on_incident callback (local incident list refresh)

run() reconnects on failure with exponential backoff and re-identifies after
every reconnect. Cancelling the task running run() closes the socket.
"""

import asyncio
import json
from typing import Callable, Optional
from urllib.parse import urlencode

import websockets
from pydantic import ValidationError

from app.client.alert_manager import AlertLifecycleManager
from app.client.proximity import ProximityEvaluator
from app.schemas.push import EventType, IncidentEvent
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Reconnect delay in seconds (doubles on each failure, max 60s)
_MIN_BACKOFF = 3
_MAX_BACKOFF = 60


class IncidentFeedClient:
    def __init__(
        self,
        url: str,
        user_id: int,
        token: Optional[str],
        evaluator: ProximityEvaluator,
        alerts: AlertLifecycleManager,
        on_incident: Callable[[IncidentEvent], None] = None,
    ):
        self.url = url
        self.user_id = user_id
        self.token = token
        self.evaluator = evaluator
        self.alerts = alerts
        self.on_incident = on_incident
        self.connected = asyncio.Event()

    def identify_message(self) -> str:
        return json.dumps({"type": "identify", "userId": self.user_id})

    def _connect_url(self) -> str:
        if not self.token:
            return self.url
        return f"{self.url}?{urlencode({'token': self.token})}"

    async def handle_message(self, raw) -> Optional[IncidentEvent]:
        """Process one server message. Never raises; callback failures are logged."""
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"[FEED] Ignoring non-JSON message: {raw!r:.200}")
            return None

        kind = data.get("type") if isinstance(data, dict) else None
        if kind == "identified":
            logger.info(f"[FEED] Identified as user {data.get('userId')}")
            return None
        if kind == "error":
            logger.warning(f"[FEED] Server error: {data.get('detail')}")
            return None

        try:
            event = IncidentEvent.model_validate(data)
        except ValidationError as e:
            logger.warning(f"[FEED] Ignoring unrecognised message type={kind!r}: {e.error_count()} error(s)")
            return None

        try:
            await self._dispatch(event)
        except Exception as e:
            # A broken UI callback must not take the feed down
            logger.error(f"[FEED] Handling {event.type.value} for incident {event.incident.id} failed: {e}",
                         exc_info=True)
        return event

    async def _dispatch(self, event: IncidentEvent) -> None:
        incident = event.incident
        if event.type == EventType.NEW_INCIDENT and incident.active:
            alert = await self.evaluator.evaluate(incident)
            if alert is not None:
                self.alerts.enqueue(alert)
        elif event.type == EventType.INCIDENT_STATUS_CHANGE and not incident.active:
            self.alerts.withdraw(incident.id)

        if self.on_incident:
            self.on_incident(event)

    async def _listen(self, ws) -> None:
        await ws.send(self.identify_message())
        self.connected.set()
        async for message in ws:
            await self.handle_message(message)

    async def run(self) -> None:
        backoff = _MIN_BACKOFF
        while True:
            logger.info(f"📡 Connecting to incident feed {self.url} as user {self.user_id}")
            try:
                async with websockets.connect(self._connect_url()) as ws:
                    logger.info("✅ Incident feed connected — listening for events...")
                    backoff = _MIN_BACKOFF  # reset on success
                    await self._listen(ws)
                logger.warning(f"⚠️  Incident feed closed by server. Reconnecting in {backoff}s")
            except (websockets.exceptions.WebSocketException, OSError, asyncio.TimeoutError) as e:
                logger.warning(f"❌ Incident feed error: {e}. Retry in {backoff}s")
            finally:
                self.connected.clear()

            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, _MAX_BACKOFF)
