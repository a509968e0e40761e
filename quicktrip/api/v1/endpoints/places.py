import logging

from fastapi import APIRouter, HTTPException

from quicktrip.models.schemas import (
    Coordinates,
    IsochroneRequest,
    IsochroneResponse,
    Place,
    SearchRequest,
    SearchResponse,
)
from quicktrip.services import search as search_module
from quicktrip.services.fixtures import get_fixture_place

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/search", response_model=SearchResponse)
async def search_places(request: SearchRequest) -> SearchResponse:
    """Places reachable within the requested time budget, nearest travel time first."""

    return await search_module.place_search_service.execute(request)


@router.post("/isochrone", response_model=IsochroneResponse)
async def reachable_area(request: IsochroneRequest) -> IsochroneResponse:
    polygon = await search_module.place_search_service.routing.isochrone(
        request.latitude,
        request.longitude,
        request.time_minutes,
        request.transport,
    )
    return IsochroneResponse(
        center=Coordinates(latitude=request.latitude, longitude=request.longitude),
        time_minutes=request.time_minutes,
        transport=request.transport,
        polygon=polygon,
    )


@router.get("/{place_id}", response_model=Place)
async def get_place(place_id: str) -> Place:
    place = get_fixture_place(place_id)
    if place is None:
        logger.info("Place not found: %s", place_id)
        raise HTTPException(status_code=404, detail="Place not found")
    return place
