# app/routers/navigation.py
"""Route calculation and geocoding — thin wrappers over TomTomClient."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.route import RouteData, RouteRequest, SearchResult
from app.services.navigation_service import TomTomClient, get_tomtom_client

router = APIRouter()


@router.post("/navigation/route", response_model=list[RouteData], summary="Calculate a route")
async def calculate_route(
    body: RouteRequest,
    user: User = Depends(get_current_user),
    tomtom: TomTomClient = Depends(get_tomtom_client),
):
    """Alternatives in TomTom order. avoidAreas are used by the reroute-around-incident action."""
    return await tomtom.calculate_route(body)


@router.get("/navigation/search", response_model=list[SearchResult], summary="Search an address")
async def search_address(
    query: Optional[str] = Query(default=None, min_length=1),
    tomtom: TomTomClient = Depends(get_tomtom_client),
):
    if not query:
        raise HTTPException(status_code=400, detail="Search query is required")
    return await tomtom.search(query)


@router.get("/navigation/reverse-geocode", response_model=Optional[SearchResult], summary="Coordinates → address")
async def reverse_geocode(
    lat: Optional[float] = Query(default=None, ge=-90, le=90),
    lon: Optional[float] = Query(default=None, ge=-180, le=180),
    tomtom: TomTomClient = Depends(get_tomtom_client),
):
    if lat is None or lon is None:
        raise HTTPException(status_code=400, detail="Latitude and longitude are required")
    return await tomtom.reverse_geocode(lat, lon)
