# app/schemas/route.py
"""
Explicit route structures. TomTom responses are mapped into these at the
boundary (navigation_service) so nothing downstream handles raw JSON blobs.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.base import CamelModel


class GeoPoint(CamelModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class RouteSummary(CamelModel):
    length_in_meters: int
    travel_time_in_seconds: int
    traffic_delay_in_seconds: int = 0


class Instruction(CamelModel):
    message: str
    route_offset_in_meters: int = 0
    street: Optional[str] = None


class RouteLeg(CamelModel):
    summary: RouteSummary
    points: List[GeoPoint] = []


class RouteData(CamelModel):
    summary: RouteSummary
    legs: List[RouteLeg] = []
    instructions: List[Instruction] = []


class AvoidArea(CamelModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    radius_meters: float = Field(gt=0)


class RouteRequest(CamelModel):
    origin: GeoPoint
    destination: GeoPoint
    avoid_tolls: bool = False
    avoid_highways: bool = False
    avoid_areas: List[AvoidArea] = []


class RouteCreate(CamelModel):
    origin: str = Field(min_length=1, max_length=255)
    destination: str = Field(min_length=1, max_length=255)
    route_data: RouteData
    avoid_tolls: bool = False
    avoid_highways: bool = False


class RouteOut(CamelModel):
    id: int
    user_id: int
    origin: str
    destination: str
    route_data: RouteData
    avoid_tolls: bool
    avoid_highways: bool
    share_code: Optional[str] = None
    created_at: datetime


class SearchResult(CamelModel):
    address: str
    latitude: float
    longitude: float
