# app/utils/geo.py
"""Great-circle helpers shared by the nearby query, the proximity evaluator and rerouting."""

import math
from typing import Tuple

EARTH_RADIUS_METERS = 6371000.0


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Straight-line distance in meters between two WGS84 points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def parse_coordinate(value, lower: float, upper: float) -> float:
    """Parse a decimal-string (or number) coordinate and range-check it."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"not a number: {value!r}")
    if math.isnan(number) or not lower <= number <= upper:
        raise ValueError(f"must be between {lower} and {upper}")
    return number


def avoid_box(lat: float, lon: float, radius_m: float) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """
    Bounding rectangle of a circle, as ((south, west), (north, east)).
    Used to turn a reroute avoid-zone into a TomTom avoidAreas rectangle.
    """
    dlat = math.degrees(radius_m / EARTH_RADIUS_METERS)
    # Longitude degrees shrink with latitude; clamp near the poles
    cos_lat = max(math.cos(math.radians(lat)), 1e-6)
    dlon = math.degrees(radius_m / (EARTH_RADIUS_METERS * cos_lat))
    return (lat - dlat, lon - dlon), (lat + dlat, lon + dlon)
