import httpx
import pytest
from unittest.mock import AsyncMock

from conftest import ORIGIN, make_place
from quicktrip.core.exceptions import IndexUnavailableError
from quicktrip.main import app
from quicktrip.services import search as search_module
from quicktrip.services.routing import RoutingService
from quicktrip.services.search import PlaceSearchService


class _Overpass:
    def __init__(self, search: AsyncMock) -> None:
        self.search = search


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def offline_search(monkeypatch) -> PlaceSearchService:
    service = PlaceSearchService(
        _Overpass(AsyncMock(side_effect=IndexUnavailableError("down"))),
        RoutingService(""),
    )
    monkeypatch.setattr(search_module, "place_search_service", service)
    return service


@pytest.mark.asyncio
async def test_health_check() -> None:
    async with _client() as client:
        response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_search_returns_places_within_budget(monkeypatch) -> None:
    service = PlaceSearchService(
        _Overpass(AsyncMock(return_value=[make_place(1), make_place(40)])),
        RoutingService(""),
    )
    monkeypatch.setattr(search_module, "place_search_service", service)

    async with _client() as client:
        response = await client.post(
            "/api/v1/places/search",
            json={
                "latitude": ORIGIN[0],
                "longitude": ORIGIN[1],
                "time_minutes": 5,
                "transport": "walking",
            },
        )

    assert response.status_code == 200
    data = response.json()
    assert data["radius"] == 417
    assert data["center"] == {"latitude": ORIGIN[0], "longitude": ORIGIN[1]}
    assert [place["id"] for place in data["places"]] == ["osm_node_1"]
    assert data["places"][0]["travel_time"] == 2


@pytest.mark.asyncio
async def test_search_survives_index_outage(offline_search) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/v1/places/search",
            json={
                "latitude": ORIGIN[0],
                "longitude": ORIGIN[1],
                "time_minutes": 30,
                "transport": "walking",
                "categories": ["cafe"],
            },
        )

    assert response.status_code == 200
    data = response.json()
    assert [place["id"] for place in data["places"]] == ["place_3"]
    assert data["radius"] == 2500


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"latitude": 91, "longitude": 0, "time_minutes": 30, "transport": "walking"},
        {"latitude": 0, "longitude": 0, "time_minutes": 2, "transport": "walking"},
        {"latitude": 0, "longitude": 0, "time_minutes": 30, "transport": "teleport"},
        {"latitude": 0, "longitude": 0, "time_minutes": 30, "transport": "walking", "price_range": "cheap"},
    ],
)
async def test_search_rejects_invalid_requests(offline_search, payload) -> None:
    async with _client() as client:
        response = await client.post("/api/v1/places/search", json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_place_from_fixtures() -> None:
    async with _client() as client:
        found = await client.get("/api/v1/places/place_2")
        missing = await client.get("/api/v1/places/osm_node_404")

    assert found.status_code == 200
    assert found.json()["name"] == "上野公園"
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_isochrone_without_routing_key_is_circular(offline_search) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/v1/places/isochrone",
            json={"latitude": ORIGIN[0], "longitude": ORIGIN[1], "time_minutes": 30, "transport": "cycling"},
        )

    assert response.status_code == 200
    data = response.json()
    assert data["transport"] == "cycling"
    assert len(data["polygon"]) == 17
    assert data["polygon"][0] == data["polygon"][-1]


@pytest.mark.asyncio
async def test_trace_id_is_echoed() -> None:
    trace_id = "0123456789abcdef0123456789abcdef"

    async with _client() as client:
        response = await client.get("/health", headers={"X-Request-Id": trace_id})

    assert response.headers["x-trace-id"] == trace_id
