from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from quicktrip.core.config import settings
from quicktrip.core.exceptions import IndexUnavailableError
from quicktrip.models.schemas import Coordinates, Place, SearchRequest, SearchResponse
from quicktrip.services import geo
from quicktrip.services.fixtures import fixture_places
from quicktrip.services.overpass import OverpassService, overpass_service
from quicktrip.services.routing import RoutingService, routing_service

logger = logging.getLogger(__name__)

ROUTED_CANDIDATE_LIMIT = 20
MAX_RESULTS = 50


class PlaceSearchService:
    """Finds places reachable from an origin within a travel time budget.

    The pipeline runs radius -> index lookup -> travel times -> filters ->
    ranking. A failed index lookup switches the whole search to the static
    fixture places; a failed route lookup only affects its own candidate.
    """

    def __init__(
        self,
        overpass: OverpassService = overpass_service,
        routing: RoutingService = routing_service,
        *,
        index_attempts: Optional[int] = None,
        index_retry_wait: Optional[wait_base] = None,
        routing_concurrency: Optional[int] = None,
    ) -> None:
        self.overpass = overpass
        self.routing = routing
        self.index_attempts = index_attempts or settings.OVERPASS_MAX_ATTEMPTS
        self.index_retry_wait = index_retry_wait or wait_exponential(multiplier=1, min=1, max=5)
        self.routing_concurrency = min(
            routing_concurrency or settings.ROUTING_CONCURRENCY,
            ROUTED_CANDIDATE_LIMIT,
        )

    async def execute(self, request: SearchRequest) -> SearchResponse:
        radius = geo.radius_for_budget(request.time_minutes, request.transport)
        logger.info(
            "Place search: origin=(%.5f, %.5f) budget=%smin mode=%s radius=%sm routing_key=%s",
            request.latitude,
            request.longitude,
            request.time_minutes,
            request.transport.value,
            radius,
            "present" if self.routing.is_enabled() else "absent",
        )

        try:
            candidates = await self._discover(request, radius)
        except IndexUnavailableError as exc:
            logger.warning("Place index unavailable (status=%s), serving fixture places: %s", exc.status, exc)
            return self.fixture_response(request, radius)

        logger.info("Index returned %s candidates", len(candidates))
        timed = await self.enrich_travel_times(request, candidates)
        places = rank_places(apply_filters(request, timed))

        logger.info("✓ Search finished: %s places within %s min", len(places), request.time_minutes)
        return _build_response(request, places, radius)

    async def _discover(self, request: SearchRequest, radius: int) -> List[Place]:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.index_attempts),
            wait=self.index_retry_wait,
            retry=retry_if_exception_type(IndexUnavailableError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info("Retrying place index (attempt %s)", attempt.retry_state.attempt_number)
                return await self.overpass.search(
                    request.latitude,
                    request.longitude,
                    radius,
                    request.categories,
                )
        return []

    async def enrich_travel_times(self, request: SearchRequest, candidates: Sequence[Place]) -> List[Place]:
        """Annotate candidates with travel minutes.

        Only the nearest ``ROUTED_CANDIDATE_LIMIT`` candidates go to the routing
        provider; the rest are estimated from mode speed.
        """

        routed = list(candidates[:ROUTED_CANDIDATE_LIMIT])
        remainder = candidates[ROUTED_CANDIDATE_LIMIT:]
        semaphore = asyncio.Semaphore(self.routing_concurrency)

        async def annotate(place: Place) -> Place:
            async with semaphore:
                try:
                    minutes = await self.routing.travel_time(
                        request.latitude,
                        request.longitude,
                        place.latitude,
                        place.longitude,
                        request.transport,
                    )
                except Exception as exc:
                    logger.warning("Travel time lookup crashed for %s, estimating: %s", place.id, exc)
                    minutes = _estimate(request, place)
            logger.debug("Travel time %s: %s min", place.id, minutes)
            return place.model_copy(update={"travel_time": minutes})

        enriched = await asyncio.gather(*(annotate(place) for place in routed))
        estimated = [place.model_copy(update={"travel_time": _estimate(request, place)}) for place in remainder]

        if estimated:
            logger.info("Estimated travel time for %s candidates beyond the routing cap", len(estimated))
        return list(enriched) + estimated

    def fixture_response(self, request: SearchRequest, radius: int) -> SearchResponse:
        places = rank_places(apply_filters(request, filter_categories(request, fixture_places())))
        logger.info("Fixture search finished: %s places", len(places))
        return _build_response(request, places, radius)


def filter_categories(request: SearchRequest, places: Iterable[Place]) -> List[Place]:
    if not request.categories:
        return list(places)
    wanted = set(request.categories)
    return [place for place in places if place.category.value in wanted]


def apply_filters(request: SearchRequest, places: Iterable[Place]) -> List[Place]:
    """Time cutoff first, then price range, open now and facilities."""

    result = [place for place in places if place.travel_time <= request.time_minutes]

    if request.price_range:
        result = [place for place in result if place.price_range == request.price_range]

    if request.open_now:
        result = [place for place in result if place.is_open]

    if request.facilities:
        wanted = set(request.facilities)
        result = [
            place for place in result
            if wanted.intersection(facility.value for facility in place.facilities)
        ]

    return result


def rank_places(places: Iterable[Place]) -> List[Place]:
    return sorted(places, key=lambda place: (place.travel_time, place.distance))[:MAX_RESULTS]


def _estimate(request: SearchRequest, place: Place) -> int:
    distance = geo.haversine_distance(request.latitude, request.longitude, place.latitude, place.longitude)
    return geo.estimate_travel_minutes(distance, request.transport)


def _build_response(request: SearchRequest, places: List[Place], radius: int) -> SearchResponse:
    return SearchResponse(
        places=places,
        center=Coordinates(latitude=request.latitude, longitude=request.longitude),
        radius=radius,
    )


place_search_service = PlaceSearchService()
