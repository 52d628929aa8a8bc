# app/services/navigation_service.py
"""
TomTom routing / search client.

Calculates routes, geocodes and reverse-geocodes through the TomTom web API
and maps the responses into app.schemas.route structures. Every failure
(connect error, timeout, non-2xx, unexpected body) becomes
UpstreamServiceFailure; nothing is retried here.

Endpoints used:
  GET  /routing/1/calculateRoute/{lat,lon:lat,lon}/json
  POST /routing/1/calculateRoute/{lat,lon:lat,lon}/json   (when avoidAreas are set)
  GET  /search/2/search/{query}.json
  GET  /search/2/reverseGeocode/{lat,lon}.json
"""

from typing import List, Optional
from urllib.parse import quote

import httpx

from app.config import settings
from app.schemas.route import (
    AvoidArea, GeoPoint, Instruction, RouteData, RouteLeg, RouteRequest, RouteSummary, SearchResult,
)
from app.utils.errors import UpstreamServiceFailure
from app.utils.geo import avoid_box
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _avoid_rectangles(areas: List[AvoidArea]) -> dict:
    rectangles = []
    for area in areas:
        (south, west), (north, east) = avoid_box(area.latitude, area.longitude, area.radius_meters)
        rectangles.append({
            "southWestCorner": {"latitude": south, "longitude": west},
            "northEastCorner": {"latitude": north, "longitude": east},
        })
    return {"avoidAreas": {"rectangles": rectangles}}


def _summary(raw: dict) -> RouteSummary:
    return RouteSummary(
        length_in_meters=int(raw.get("lengthInMeters", 0)),
        travel_time_in_seconds=int(raw.get("travelTimeInSeconds", 0)),
        traffic_delay_in_seconds=int(raw.get("trafficDelayInSeconds", 0)),
    )


def parse_route(raw: dict) -> RouteData:
    """Map one entry of TomTom's `routes` array into RouteData."""
    legs = [
        RouteLeg(
            summary=_summary(leg.get("summary", {})),
            points=[GeoPoint(latitude=p["latitude"], longitude=p["longitude"]) for p in leg.get("points", [])],
        )
        for leg in raw.get("legs", [])
    ]
    instructions = [
        Instruction(
            message=i.get("message", ""),
            route_offset_in_meters=int(i.get("routeOffsetInMeters", 0)),
            street=i.get("street"),
        )
        for i in raw.get("guidance", {}).get("instructions", [])
    ]
    return RouteData(summary=_summary(raw.get("summary", {})), legs=legs, instructions=instructions)


def _format_address(raw: dict) -> str:
    address = raw.get("address", {})
    return address.get("freeformAddress") or address.get("streetName") or ""


class TomTomClient:
    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        language: str = None,
        country_set: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.TOMTOM_API_KEY
        self.base_url = (base_url or settings.TOMTOM_BASE_URL).rstrip("/")
        self.language = language or settings.TOMTOM_LANGUAGE
        self.country_set = country_set or settings.TOMTOM_COUNTRY_SET
        self.timeout = timeout or settings.TOMTOM_TIMEOUT_SECONDS
        self._transport = transport

    async def _request(self, method: str, path: str, params: dict, json: dict = None) -> dict:
        params = {"key": self.api_key, **params}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(method, path, params=params, json=json)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException:
            logger.warning(f"⏱  TomTom timeout on {path}")
            raise UpstreamServiceFailure("Routing service timed out")
        except httpx.HTTPStatusError as e:
            logger.warning(f"❌ TomTom returned HTTP {e.response.status_code} on {path}")
            raise UpstreamServiceFailure(f"Routing service returned HTTP {e.response.status_code}")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"❌ TomTom request failed on {path}: {e}")
            raise UpstreamServiceFailure("Routing service unavailable")

    async def calculate_route(self, request: RouteRequest) -> List[RouteData]:
        o, d = request.origin, request.destination
        path = f"/routing/1/calculateRoute/{o.latitude},{o.longitude}:{d.latitude},{d.longitude}/json"
        params = {
            "instructionsType": "text",
            "language": self.language,
            "traffic": "true",
        }
        avoid = []
        if request.avoid_tolls:
            avoid.append("tollRoads")
        if request.avoid_highways:
            avoid.append("motorways")
        if avoid:
            params["avoid"] = avoid

        if request.avoid_areas:
            body = await self._request("POST", path, params, json=_avoid_rectangles(request.avoid_areas))
        else:
            body = await self._request("GET", path, params)

        try:
            routes = [parse_route(r) for r in body.get("routes", [])]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"❌ Unexpected TomTom route payload: {e}")
            raise UpstreamServiceFailure("Routing service returned an unexpected payload")
        logger.info(f"[ROUTE] {len(routes)} route(s), {len(request.avoid_areas)} avoid area(s)")
        return routes

    async def search(self, query: str) -> List[SearchResult]:
        path = f"/search/2/search/{quote(query, safe='')}.json"
        body = await self._request("GET", path, {"language": self.language, "countrySet": self.country_set})
        return [
            SearchResult(address=_format_address(r), latitude=r["position"]["lat"], longitude=r["position"]["lon"])
            for r in body.get("results", [])
            if "position" in r
        ]

    async def reverse_geocode(self, lat: float, lon: float) -> Optional[SearchResult]:
        body = await self._request("GET", f"/search/2/reverseGeocode/{lat},{lon}.json", {"language": self.language})
        addresses = body.get("addresses", [])
        if not addresses:
            return None
        return SearchResult(address=_format_address(addresses[0]), latitude=lat, longitude=lon)


def get_tomtom_client() -> TomTomClient:
    """FastAPI dependency — overridden in tests with a MockTransport-backed client."""
    return TomTomClient()
