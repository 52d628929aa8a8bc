# app/schemas/push.py
"""Push-channel (WebSocket) message shapes."""

from enum import Enum
from typing import Literal

from pydantic import AliasChoices, Field

from app.schemas.base import CamelModel
from app.schemas.incident import IncidentOut


class EventType(str, Enum):
    NEW_INCIDENT = "new_incident"
    INCIDENT_UPDATE = "incident_update"
    INCIDENT_STATUS_CHANGE = "incident_status_change"


class IdentifyMessage(CamelModel):
    """Client → server: {"type": "identify", "userId": <int>}"""
    type: Literal["identify"]
    user_id: int = Field(validation_alias=AliasChoices("userId", "user_id"))


class IncidentEvent(CamelModel):
    """Server → client: {"type": "new_incident" | ..., "incident": <Incident>}"""
    type: EventType
    incident: IncidentOut
