# app/services/broadcaster.py
"""
Broadcast Dispatcher — pushes incident lifecycle events to every open channel.

Delivery is at-most-once and best effort: sends run concurrently, each bounded
by PUSH_SEND_TIMEOUT_SECONDS, and a failing or stalled channel is logged and
skipped. Nothing is retried or acknowledged. No geographic filtering happens
here; relevance is decided by each client.
"""

import asyncio
import json
from dataclasses import dataclass

from app.config import settings
from app.models.incident import Incident
from app.schemas.incident import IncidentOut
from app.schemas.push import EventType
from app.services.connection_registry import ConnectionRegistry
from app.utils.errors import ChannelDeliveryFailure
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class BroadcastReport:
    attempted: int = 0
    delivered: int = 0
    failed: int = 0


def serialize_event(event_type: EventType, incident: Incident) -> str:
    payload = {
        "type": event_type.value,
        "incident": IncidentOut.model_validate(incident).model_dump(mode="json", by_alias=True),
    }
    return json.dumps(payload)


class IncidentBroadcaster:
    def __init__(self, registry: ConnectionRegistry, send_timeout_seconds: float = None):
        self.registry = registry
        self.send_timeout_seconds = (settings.PUSH_SEND_TIMEOUT_SECONDS
                                     if send_timeout_seconds is None else send_timeout_seconds)

    async def _send(self, channel, message: str, event_type: EventType, incident: Incident) -> bool:
        try:
            await asyncio.wait_for(channel.send_text(message), self.send_timeout_seconds)
            return True
        except asyncio.TimeoutError:
            failure = ChannelDeliveryFailure(f"send timed out after {self.send_timeout_seconds}s")
        except Exception as e:
            failure = ChannelDeliveryFailure(f"{type(e).__name__}: {e}")
        logger.warning(
            f"[PUSH] {event_type.value} for incident {incident.id} not delivered "
            f"to user={self.registry.user_for(channel)}: {failure}"
        )
        return False

    async def broadcast(self, event_type: EventType, incident: Incident) -> BroadcastReport:
        event_type = EventType(event_type)
        message = serialize_event(event_type, incident)
        channels = self.registry.channels()

        # Concurrent sends; a stalled channel costs at most send_timeout_seconds
        results = await asyncio.gather(*(self._send(ch, message, event_type, incident) for ch in channels))
        report = BroadcastReport(attempted=len(results), delivered=sum(results))
        report.failed = report.attempted - report.delivered

        logger.info(
            f"[PUSH] {event_type.value} incident={incident.id} → "
            f"{report.delivered}/{report.attempted} channels"
        )
        return report
