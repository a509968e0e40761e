"""Geodesy helpers and speed tables per travel mode.

Distances are in meters and times in minutes unless a name says otherwise.
Nothing in here performs I/O.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict

from quicktrip.models.schemas import TransportMode

EARTH_RADIUS_M = 6_371_000
METERS_PER_DEGREE = 111_000

SPEED_KMH: Dict[str, float] = {
    TransportMode.WALKING.value: 5.0,
    TransportMode.CYCLING.value: 15.0,
    TransportMode.DRIVING.value: 30.0,
    TransportMode.TRANSIT.value: 20.0,
}

# Estimates and radii are computed from km/h. The per-minute table is its
# two-decimal display form (83.33 m/min), too coarse to drive the math: 1 km
# on foot would come out at 13 min and a 3 h walk radius 1 m short.
SPEED_M_PER_MIN: Dict[str, float] = {
    mode: round(kmh * 1000 / 60, 2) for mode, kmh in SPEED_KMH.items()
}


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    def as_overpass(self) -> str:
        return f"{self.south},{self.west},{self.north},{self.east}"


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def bounding_box(lat: float, lng: float, radius_meters: float) -> BoundingBox:
    # cos(lat) shrinks towards the poles, so the longitude span grows without bound there.
    lat_delta = radius_meters / METERS_PER_DEGREE
    lng_delta = radius_meters / (METERS_PER_DEGREE * math.cos(math.radians(lat)))
    return BoundingBox(
        south=lat - lat_delta,
        west=lng - lng_delta,
        north=lat + lat_delta,
        east=lng + lng_delta,
    )


def _mode_key(mode: str) -> str:
    return getattr(mode, "value", mode)


def speed_kmh(mode: str) -> float:
    return SPEED_KMH.get(_mode_key(mode), SPEED_KMH[TransportMode.WALKING.value])


def speed_meters_per_minute(mode: str) -> float:
    return SPEED_M_PER_MIN.get(_mode_key(mode), SPEED_M_PER_MIN[TransportMode.WALKING.value])


def radius_for_budget(time_minutes: float, mode: str) -> int:
    """Straight-line distance in meters coverable within ``time_minutes``."""

    return int(round(speed_kmh(mode) * time_minutes / 60 * 1000))


def estimate_travel_minutes(distance_meters: float, mode: str) -> int:
    """Speed-based travel time, rounded up to whole minutes."""

    minutes = distance_meters / 1000 / speed_kmh(mode) * 60
    return max(0, math.ceil(round(minutes, 6)))
