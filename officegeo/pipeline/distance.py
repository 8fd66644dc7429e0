"""Great-circle distances and road-distance estimates for display."""

from __future__ import annotations

import math

from officegeo.common.constants import (
    CIRCUITY_FACTOR_LONG,
    CIRCUITY_FACTOR_MEDIUM,
    CIRCUITY_FACTOR_SHORT,
    CIRCUITY_MEDIUM_LIMIT_KM,
    CIRCUITY_SHORT_LIMIT_KM,
    EARTH_RADIUS_KM,
)
from officegeo.common.models import Coordinate

MISSING_DISTANCE = "—"


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_between(a: Coordinate | None, b: Coordinate | None) -> float | None:
    if a is None or b is None:
        return None
    return calculate_distance(a.lat, a.lon, b.lat, b.lon)


def get_circuity_factor(straight_line_km: float) -> float:
    if straight_line_km < CIRCUITY_SHORT_LIMIT_KM:
        return CIRCUITY_FACTOR_SHORT
    if straight_line_km <= CIRCUITY_MEDIUM_LIMIT_KM:
        return CIRCUITY_FACTOR_MEDIUM
    return CIRCUITY_FACTOR_LONG


def estimate_road_distance(straight_line_km: float) -> float:
    return straight_line_km * get_circuity_factor(straight_line_km)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_distance(km: float | None, use_road_estimate: bool = False) -> str:
    if km is None:
        return MISSING_DISTANCE

    if not use_road_estimate:
        if km < 1:
            return f"{_round_half_up(km * 1000)} m"
        return f"{km:.1f} km"

    road_km = estimate_road_distance(km)
    if road_km < 10:
        return f"~{max(1, _round_half_up(road_km))} km"
    if road_km < 100:
        return f"~{_round_half_up(road_km / 5) * 5} km"
    return f"~{_round_half_up(road_km / 10) * 10} km"
