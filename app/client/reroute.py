# app/client/reroute.py
"""
Client-side navigation state and the reroute collaborator used by
AlertLifecycleManager: recalculates the active route through
POST /api/navigation/route with the incident as an avoid area.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from app.schemas.route import AvoidArea, GeoPoint, RouteData, RouteRequest
from app.utils.errors import UpstreamServiceFailure
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class NavigationSession:
    """The user's active navigation, if any."""
    origin: Optional[GeoPoint] = None
    destination: Optional[GeoPoint] = None
    avoid_tolls: bool = False
    avoid_highways: bool = False
    route: Optional[RouteData] = None
    avoid_areas: List[AvoidArea] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.route is not None and self.destination is not None

    def start(self, origin: GeoPoint, destination: GeoPoint, route: RouteData,
              avoid_tolls: bool = False, avoid_highways: bool = False) -> None:
        self.origin, self.destination, self.route = origin, destination, route
        self.avoid_tolls, self.avoid_highways = avoid_tolls, avoid_highways
        self.avoid_areas = []

    def stop(self) -> None:
        self.route = None
        self.destination = None
        self.avoid_areas = []

    def active_route(self) -> Optional[RouteData]:
        return self.route if self.is_active else None


class RouteRecalculator:
    def __init__(self, base_url: str, token: str, navigation: NavigationSession,
                 timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.navigation = navigation
        self.timeout = timeout
        self._transport = transport

    async def __call__(self, area: AvoidArea) -> Optional[RouteData]:
        nav = self.navigation
        if not nav.is_active:
            logger.warning("[REROUTE] No active route to recalculate")
            return None

        # Keep earlier avoid areas so a second reroute does not undo the first
        avoid_areas = nav.avoid_areas + [area]
        request = RouteRequest(
            origin=nav.origin,
            destination=nav.destination,
            avoid_tolls=nav.avoid_tolls,
            avoid_highways=nav.avoid_highways,
            avoid_areas=avoid_areas,
        )
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                         transport=self._transport) as client:
                response = await client.post(
                    "/api/navigation/route",
                    json=request.model_dump(mode="json", by_alias=True),
                    headers={"Authorization": f"Bearer {self.token}"},
                )
                response.raise_for_status()
                routes = [RouteData.model_validate(r) for r in response.json()]
        except httpx.HTTPError as e:
            raise UpstreamServiceFailure(f"Route recalculation failed: {e}")

        if not routes:
            raise UpstreamServiceFailure("Route recalculation returned no route")

        nav.route = routes[0]
        nav.avoid_areas = avoid_areas
        logger.info(
            f"[REROUTE] New route avoiding ({area.latitude:.5f}, {area.longitude:.5f}) "
            f"r={area.radius_meters:.0f} m — {nav.route.summary.length_in_meters} m, "
            f"{nav.route.summary.travel_time_in_seconds} s"
        )
        return nav.route
