# app/client/proximity.py
"""
Proximity Evaluator — decides whether a broadcast incident should alert the
local user.

Relevance is a flat radius around the user's last known fix (haversine,
inclusive at the radius). The incident is not projected onto the active route.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple

from app.config import settings
from app.schemas.incident import IncidentOut
from app.utils.errors import GeolocationUnavailable
from app.utils.geo import haversine_meters
from app.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LOCATION_LABEL = "nearby road"

LocationProvider = Callable[[], Awaitable[Tuple[float, float]]]


@dataclass
class ProximityAlert:
    incident_id: int
    type: str
    comment: Optional[str]
    distance: float          # meters
    location: str            # approximate label shown in the alert
    latitude: float
    longitude: float


class ProximityEvaluator:
    def __init__(
        self,
        user_id: int,
        location_provider: LocationProvider,
        radius_meters: float = None,
        active_route: Callable[[], object] = None,
        require_active_route: bool = False,
        label_for: Callable[[float, float], str] = None,
    ):
        self.user_id = user_id
        self.location_provider = location_provider
        self.radius_meters = settings.ALERT_RADIUS_METERS if radius_meters is None else radius_meters
        self.active_route = active_route
        self.require_active_route = require_active_route
        self.label_for = label_for

    def is_within_radius(self, distance: float) -> bool:
        return distance <= self.radius_meters

    def _navigating(self) -> bool:
        return self.active_route is not None and self.active_route() is not None

    async def evaluate(self, incident: IncidentOut) -> Optional[ProximityAlert]:
        if incident.reported_by == self.user_id:
            return None
        if self.require_active_route and not self._navigating():
            return None

        try:
            user_lat, user_lon = await self.location_provider()
        except GeolocationUnavailable as e:
            logger.warning(f"[PROXIMITY] Skipping incident {incident.id}: {e}")
            return None
        except Exception as e:
            logger.warning(f"[PROXIMITY] Location provider failed for incident {incident.id}: {e}")
            return None

        try:
            lat, lon = float(incident.latitude), float(incident.longitude)
        except ValueError:
            logger.warning(f"[PROXIMITY] Incident {incident.id} has unparseable coordinates")
            return None

        distance = haversine_meters(user_lat, user_lon, lat, lon)
        if not self.is_within_radius(distance):
            logger.debug(f"[PROXIMITY] Incident {incident.id} at {distance:.0f} m — outside radius")
            return None

        label = self.label_for(lat, lon) if self.label_for else DEFAULT_LOCATION_LABEL
        logger.info(f"[PROXIMITY] Incident {incident.id} ({incident.type}) {distance:.0f} m away → alert")
        return ProximityAlert(
            incident_id=incident.id,
            type=incident.type,
            comment=incident.comment,
            distance=distance,
            location=label,
            latitude=lat,
            longitude=lon,
        )
