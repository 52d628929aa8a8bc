# tests/test_navigation_service.py
"""Tests for TomTomClient against httpx.MockTransport, plus the navigation endpoints."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json
import httpx
import pytest
from app.schemas.route import AvoidArea, GeoPoint, RouteRequest
from app.services.navigation_service import TomTomClient, get_tomtom_client, parse_route
from app.utils.errors import UpstreamServiceFailure
from conftest import auth

ROUTE_BODY = {
    "routes": [{
        "summary": {"lengthInMeters": 4200, "travelTimeInSeconds": 600, "trafficDelayInSeconds": 30},
        "legs": [{
            "summary": {"lengthInMeters": 4200, "travelTimeInSeconds": 600},
            "points": [{"latitude": 48.8566, "longitude": 2.3522}, {"latitude": 48.8738, "longitude": 2.2950}],
        }],
        "guidance": {"instructions": [
            {"message": "Head north", "routeOffsetInMeters": 0, "street": "Rue de Rivoli"},
        ]},
    }],
}

REQUEST = RouteRequest(
    origin=GeoPoint(latitude=48.8566, longitude=2.3522),
    destination=GeoPoint(latitude=48.8738, longitude=2.2950),
)


def client_for(handler):
    return TomTomClient(api_key="k", base_url="https://tomtom.test", transport=httpx.MockTransport(handler))


class TestCalculateRoute:
    @pytest.mark.asyncio
    async def test_plain_route_uses_get(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=ROUTE_BODY)

        routes = await client_for(handler).calculate_route(REQUEST)

        assert seen[0].method == "GET"
        assert "/calculateRoute/48.8566,2.3522:48.8738,2.295/json" in seen[0].url.path
        assert seen[0].url.params["key"] == "k"
        assert routes[0].summary.length_in_meters == 4200
        assert routes[0].instructions[0].street == "Rue de Rivoli"

    @pytest.mark.asyncio
    async def test_avoid_flags(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=ROUTE_BODY)

        request = REQUEST.model_copy(update={"avoid_tolls": True, "avoid_highways": True})
        await client_for(handler).calculate_route(request)
        assert seen[0].url.params.get_list("avoid") == ["tollRoads", "motorways"]

    @pytest.mark.asyncio
    async def test_avoid_areas_posted_as_rectangles(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=ROUTE_BODY)

        request = REQUEST.model_copy(update={
            "avoid_areas": [AvoidArea(latitude=48.86, longitude=2.33, radius_meters=500)],
        })
        await client_for(handler).calculate_route(request)

        assert seen[0].method == "POST"
        rect = json.loads(seen[0].content)["avoidAreas"]["rectangles"][0]
        assert rect["southWestCorner"]["latitude"] < 48.86 < rect["northEastCorner"]["latitude"]
        assert rect["southWestCorner"]["longitude"] < 2.33 < rect["northEastCorner"]["longitude"]

    @pytest.mark.asyncio
    async def test_http_error_becomes_upstream_failure(self):
        client = client_for(lambda request: httpx.Response(403, json={"error": "bad key"}))
        with pytest.raises(UpstreamServiceFailure):
            await client.calculate_route(REQUEST)

    @pytest.mark.asyncio
    async def test_connect_error_becomes_upstream_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamServiceFailure):
            await client_for(handler).calculate_route(REQUEST)


class TestGeocoding:
    @pytest.mark.asyncio
    async def test_search(self):
        body = {"results": [
            {"address": {"freeformAddress": "Tour Eiffel, Paris"}, "position": {"lat": 48.858, "lon": 2.294}},
            {"address": {"freeformAddress": "no position"}},
        ]}
        results = await client_for(lambda request: httpx.Response(200, json=body)).search("tour eiffel")
        assert len(results) == 1
        assert results[0].address == "Tour Eiffel, Paris"

    @pytest.mark.asyncio
    async def test_reverse_geocode_empty(self):
        result = await client_for(lambda request: httpx.Response(200, json={"addresses": []})).reverse_geocode(1, 2)
        assert result is None


class TestParseRoute:
    def test_missing_sections_default_to_empty(self):
        route = parse_route({"summary": {"lengthInMeters": 10, "travelTimeInSeconds": 2}})
        assert route.legs == [] and route.instructions == []


class TestNavigationEndpoints:
    def test_route_endpoint_maps_upstream_failure_to_500(self, client, alice):
        client.app.dependency_overrides[get_tomtom_client] = lambda: client_for(
            lambda request: httpx.Response(502))
        try:
            resp = client.post("/api/navigation/route", headers=auth(alice[1]), json={
                "origin": {"latitude": 48.8566, "longitude": 2.3522},
                "destination": {"latitude": 48.8738, "longitude": 2.2950},
            })
        finally:
            client.app.dependency_overrides.clear()
        assert resp.status_code == 500

    def test_route_endpoint_returns_camel_case(self, client, alice):
        client.app.dependency_overrides[get_tomtom_client] = lambda: client_for(
            lambda request: httpx.Response(200, json=ROUTE_BODY))
        try:
            resp = client.post("/api/navigation/route", headers=auth(alice[1]), json={
                "origin": {"latitude": 48.8566, "longitude": 2.3522},
                "destination": {"latitude": 48.8738, "longitude": 2.2950},
                "avoidAreas": [{"latitude": 48.86, "longitude": 2.33, "radiusMeters": 500}],
            })
        finally:
            client.app.dependency_overrides.clear()
        assert resp.status_code == 200
        assert resp.json()[0]["summary"]["lengthInMeters"] == 4200

    def test_search_requires_query(self, client):
        assert client.get("/api/navigation/search").status_code == 400
