# app/schemas/incident.py
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, Field, StrictBool, field_validator

from app.schemas.base import CamelModel
from app.utils.geo import parse_coordinate


class IncidentType(str, Enum):
    ACCIDENT = "accident"
    TRAFFIC = "traffic"
    CLOSURE = "closure"
    POLICE = "police"
    HAZARD = "hazard"
    OBSTACLE = "obstacle"
    CONSTRUCTION = "construction"
    OTHER = "other"


class IncidentCreate(CamelModel):
    type: IncidentType
    latitude: str
    longitude: str
    comment: Optional[str] = Field(default=None, max_length=500)

    @field_validator("latitude", mode="before")
    @classmethod
    def _check_latitude(cls, value):
        parse_coordinate(value, -90.0, 90.0)
        return str(value).strip()

    @field_validator("longitude", mode="before")
    @classmethod
    def _check_longitude(cls, value):
        parse_coordinate(value, -180.0, 180.0)
        return str(value).strip()


class IncidentOut(CamelModel):
    """Wire-exact incident: {id, type, latitude, longitude, comment, reportedBy, active, ...}."""
    id: int
    type: str
    latitude: str
    longitude: str
    comment: Optional[str] = None
    reported_by: int
    active: bool
    confirmed: int
    refuted: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class IncidentStatusUpdate(CamelModel):
    active: StrictBool


class IncidentAdminUpdate(CamelModel):
    type: Optional[IncidentType] = None
    comment: Optional[str] = Field(default=None, max_length=500)
    active: Optional[StrictBool] = None


class VerificationCreate(CamelModel):
    # Web client sends isConfirmed on /verify and isConfirmation on /react
    is_confirmed: StrictBool = Field(
        validation_alias=AliasChoices("isConfirmed", "isConfirmation", "is_confirmed")
    )


class VerificationOut(CamelModel):
    id: int
    incident_id: int
    user_id: int
    is_confirmed: bool
    created_at: datetime
