import math

import pytest

from quicktrip.models.schemas import TransportMode
from quicktrip.services import geo


def test_haversine_zero_for_same_point() -> None:
    assert geo.haversine_distance(35.6762, 139.6503, 35.6762, 139.6503) == 0


def test_haversine_is_symmetric() -> None:
    a = (35.6762, 139.6503)
    b = (35.7101, 139.8107)

    assert geo.haversine_distance(*a, *b) == pytest.approx(geo.haversine_distance(*b, *a))


def test_haversine_one_degree_along_equator() -> None:
    expected = 2 * math.pi * 6_371_000 / 360

    assert geo.haversine_distance(0.0, 0.0, 0.0, 1.0) == pytest.approx(expected, rel=1e-9)


def test_bounding_box_at_equator_is_square() -> None:
    bbox = geo.bounding_box(0.0, 10.0, 1110)

    assert bbox.south == pytest.approx(-0.01)
    assert bbox.north == pytest.approx(0.01)
    assert bbox.west == pytest.approx(9.99)
    assert bbox.east == pytest.approx(10.01)


def test_bounding_box_widens_longitude_away_from_equator() -> None:
    bbox = geo.bounding_box(60.0, 0.0, 1110)

    assert bbox.north - bbox.south == pytest.approx(0.02)
    assert bbox.east - bbox.west == pytest.approx(0.04)


def test_bounding_box_overpass_format() -> None:
    bbox = geo.BoundingBox(south=1.0, west=2.0, north=3.0, east=4.0)

    assert bbox.as_overpass() == "1.0,2.0,3.0,4.0"


@pytest.mark.parametrize(
    "mode, expected",
    [
        (TransportMode.WALKING, 83.33),
        (TransportMode.CYCLING, 250.0),
        (TransportMode.DRIVING, 500.0),
        (TransportMode.TRANSIT, 333.33),
        ("transit", 333.33),
        ("teleport", 83.33),
    ],
)
def test_speed_meters_per_minute(mode, expected) -> None:
    assert geo.speed_meters_per_minute(mode) == expected


@pytest.mark.parametrize("mode", list(TransportMode))
def test_per_minute_table_follows_kmh(mode) -> None:
    assert geo.speed_meters_per_minute(mode) == round(geo.speed_kmh(mode) * 1000 / 60, 2)


def test_estimates_use_exact_kmh_speed() -> None:
    # 1000 / 83.33 is just over 12 minutes; 5 km/h is exactly 12.
    assert geo.estimate_travel_minutes(1000, TransportMode.WALKING) == 12
    assert geo.radius_for_budget(180, TransportMode.WALKING) == 15000


@pytest.mark.parametrize(
    "minutes, mode, expected",
    [
        (30, TransportMode.WALKING, 2500),
        (60, TransportMode.DRIVING, 30000),
        (45, TransportMode.TRANSIT, 15000),
        (20, TransportMode.CYCLING, 5000),
        (30, "hovercraft", 2500),
    ],
)
def test_radius_for_budget(minutes, mode, expected) -> None:
    assert geo.radius_for_budget(minutes, mode) == expected


@pytest.mark.parametrize("mode", list(TransportMode))
def test_radius_for_budget_is_monotonic(mode) -> None:
    radii = [geo.radius_for_budget(minutes, mode) for minutes in range(5, 181)]

    assert radii == sorted(radii)


def test_estimate_travel_minutes_walking_kilometre() -> None:
    assert geo.estimate_travel_minutes(1000, TransportMode.WALKING) == 12


def test_estimate_travel_minutes_rounds_up() -> None:
    assert geo.estimate_travel_minutes(1001, TransportMode.WALKING) == 13
    assert geo.estimate_travel_minutes(2500, TransportMode.CYCLING) == 10
    assert geo.estimate_travel_minutes(0, TransportMode.DRIVING) == 0


def test_estimate_travel_minutes_unknown_mode_walks() -> None:
    assert geo.estimate_travel_minutes(1000, "rocket") == 12
