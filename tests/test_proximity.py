# tests/test_proximity.py
"""Unit tests for ProximityEvaluator."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, patch
from app.client.location import LastKnownLocation
from app.client.proximity import DEFAULT_LOCATION_LABEL, ProximityEvaluator
from app.schemas.incident import IncidentOut
from app.utils.errors import GeolocationUnavailable

USER_ID = 2


def make_incident(reported_by=1, latitude="48.8566", longitude="2.3522", **overrides):
    fields = dict(
        id=10, type="accident", latitude=latitude, longitude=longitude, comment="two cars",
        reported_by=reported_by, active=True, confirmed=0, refuted=0, created_at=datetime.utcnow(),
    )
    fields.update(overrides)
    return IncidentOut(**fields)


def fixed_location(lat=48.8576, lon=2.3522):
    return AsyncMock(return_value=(lat, lon))


class TestRadius:
    @pytest.mark.asyncio
    async def test_exactly_at_radius_is_relevant(self):
        evaluator = ProximityEvaluator(USER_ID, fixed_location(), radius_meters=5000)
        with patch("app.client.proximity.haversine_meters", return_value=5000.0):
            alert = await evaluator.evaluate(make_incident())
        assert alert is not None
        assert alert.distance == 5000.0

    @pytest.mark.asyncio
    async def test_just_outside_radius_is_ignored(self):
        evaluator = ProximityEvaluator(USER_ID, fixed_location(), radius_meters=5000)
        with patch("app.client.proximity.haversine_meters", return_value=5001.0):
            assert await evaluator.evaluate(make_incident()) is None

    @pytest.mark.asyncio
    async def test_alert_carries_incident_details(self):
        evaluator = ProximityEvaluator(USER_ID, fixed_location())
        alert = await evaluator.evaluate(make_incident())

        assert alert.incident_id == 10
        assert alert.type == "accident"
        assert alert.comment == "two cars"
        assert alert.distance == pytest.approx(111, abs=2)
        assert alert.location == DEFAULT_LOCATION_LABEL
        assert (alert.latitude, alert.longitude) == (48.8566, 2.3522)

    @pytest.mark.asyncio
    async def test_custom_label(self):
        evaluator = ProximityEvaluator(USER_ID, fixed_location(), label_for=lambda lat, lon: "Rue de Rivoli")
        alert = await evaluator.evaluate(make_incident())
        assert alert.location == "Rue de Rivoli"


class TestExclusions:
    @pytest.mark.asyncio
    async def test_own_report_never_alerts(self):
        provider = fixed_location()
        evaluator = ProximityEvaluator(USER_ID, provider)
        assert await evaluator.evaluate(make_incident(reported_by=USER_ID)) is None
        provider.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_fix_fails_closed(self):
        evaluator = ProximityEvaluator(USER_ID, LastKnownLocation().current)
        assert await evaluator.evaluate(make_incident()) is None

    @pytest.mark.asyncio
    async def test_provider_error_fails_closed(self):
        provider = AsyncMock(side_effect=GeolocationUnavailable("permission denied"))
        evaluator = ProximityEvaluator(USER_ID, provider)
        assert await evaluator.evaluate(make_incident()) is None

    @pytest.mark.asyncio
    async def test_unparseable_coordinates_ignored(self):
        evaluator = ProximityEvaluator(USER_ID, fixed_location())
        assert await evaluator.evaluate(make_incident(latitude="n/a")) is None

    @pytest.mark.asyncio
    async def test_require_active_route(self):
        route = None
        evaluator = ProximityEvaluator(USER_ID, fixed_location(), active_route=lambda: route,
                                       require_active_route=True)
        assert await evaluator.evaluate(make_incident()) is None
        route = object()
        assert await evaluator.evaluate(make_incident()) is not None


class TestLastKnownLocation:
    @pytest.mark.asyncio
    async def test_update_then_current(self):
        location = LastKnownLocation()
        location.update(48.0, 2.0)
        assert await location.current() == (48.0, 2.0)

    @pytest.mark.asyncio
    async def test_failure_clears_fix(self):
        location = LastKnownLocation()
        location.update(48.0, 2.0)
        location.fail("timeout")
        with pytest.raises(GeolocationUnavailable):
            await location.current()
