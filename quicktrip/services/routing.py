import logging
import math
from typing import Any, Dict, List, Optional

import httpx

from quicktrip.core.config import settings
from quicktrip.core.exceptions import RoutingUnavailableError
from quicktrip.models.schemas import TransportMode
from quicktrip.services import geo

logger = logging.getLogger(__name__)

# OpenRouteService has no public transport profile, transit is routed on foot.
ROUTE_PROFILES: Dict[str, str] = {
    TransportMode.WALKING.value: "foot-walking",
    TransportMode.DRIVING.value: "driving-car",
    TransportMode.CYCLING.value: "cycling-regular",
    TransportMode.TRANSIT.value: "foot-walking",
}
DEFAULT_PROFILE = "foot-walking"

ISOCHRONE_POINTS = 16
# A closed ring needs three corners plus the repeated first point.
MIN_RING_POINTS = 4
KM_PER_DEGREE = 111

ROUTING_FAILURES = (
    RoutingUnavailableError,
    httpx.HTTPError,
    ValueError,
    KeyError,
    TypeError,
    IndexError,
)


class RoutingService:
    """Travel times and reachability polygons from OpenRouteService.

    Neither public call raises: when the provider is missing, slow or broken
    the answer is derived from straight-line distance and mode speed.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.OPENROUTESERVICE_API_KEY
        self.base_url = (base_url or settings.OPENROUTESERVICE_URL).rstrip("/")
        self.timeout = timeout or settings.ROUTING_REQUEST_TIMEOUT
        self._transport = transport

        if not self.api_key:
            logger.warning("OpenRouteService API key not configured, travel times will be estimated")

    def is_enabled(self) -> bool:
        return bool(self.api_key)

    async def travel_time(
        self,
        from_lat: float,
        from_lng: float,
        to_lat: float,
        to_lng: float,
        mode: str,
    ) -> int:
        """Minutes between two points, live when possible, estimated otherwise."""

        minutes = await self.route_minutes(from_lat, from_lng, to_lat, to_lng, mode)
        if minutes is not None:
            return minutes
        return self.estimate_travel_time(from_lat, from_lng, to_lat, to_lng, mode)

    async def route_minutes(
        self,
        from_lat: float,
        from_lng: float,
        to_lat: float,
        to_lng: float,
        mode: str,
    ) -> Optional[int]:
        """Live provider duration in minutes, or None when it cannot be had."""

        if not self.is_enabled():
            return None

        profile = get_route_profile(mode)
        payload = {"coordinates": [[from_lng, from_lat], [to_lng, to_lat]]}

        try:
            data = await self._post(f"/directions/{profile}/geojson", payload)
            routes = data.get("routes") or []
            if not routes:
                logger.warning("No route returned for profile %s", profile)
                return None
            duration = float(routes[0]["summary"]["duration"])
            if not math.isfinite(duration):
                raise ValueError(f"non-finite route duration {duration!r}")
            minutes = math.ceil(duration / 60)
        except ROUTING_FAILURES as exc:
            logger.warning("Route calculation failed (%s): %s", profile, exc)
            return None

        return max(0, minutes)

    def estimate_travel_time(
        self,
        from_lat: float,
        from_lng: float,
        to_lat: float,
        to_lng: float,
        mode: str,
    ) -> int:
        distance = geo.haversine_distance(from_lat, from_lng, to_lat, to_lng)
        return geo.estimate_travel_minutes(distance, mode)

    async def isochrone(self, lat: float, lng: float, time_minutes: float, mode: str) -> List[List[float]]:
        """Polygon of ``[lat, lng]`` points reachable within ``time_minutes``."""

        if self.is_enabled():
            profile = get_route_profile(mode)
            payload = {
                "locations": [[lng, lat]],
                "range": [time_minutes * 60],
                "range_type": "time",
            }
            try:
                data = await self._post(f"/isochrones/{profile}", payload)
                features = data.get("features") or []
                if features:
                    ring = features[0]["geometry"]["coordinates"][0]
                    if len(ring) >= MIN_RING_POINTS:
                        return [[float(point[1]), float(point[0])] for point in ring]
                logger.warning("Empty isochrone returned for profile %s", profile)
            except ROUTING_FAILURES as exc:
                logger.warning("Isochrone calculation failed (%s): %s", profile, exc)

        return approximate_isochrone(lat, lng, time_minutes, mode)

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                f"{self.base_url}{path}",
                json=payload,
                headers={"Authorization": self.api_key or "", "Content-Type": "application/json"},
            )

        if not response.is_success:
            raise RoutingUnavailableError(
                f"OpenRouteService error: {response.status_code}",
                status=response.status_code,
            )

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("OpenRouteService returned an unexpected body")
        return data


def get_route_profile(mode: str) -> str:
    return ROUTE_PROFILES.get(getattr(mode, "value", mode), DEFAULT_PROFILE)


def approximate_isochrone(lat: float, lng: float, time_minutes: float, mode: str) -> List[List[float]]:
    """Regular polygon around the origin sized by mode speed, closed on its first point."""

    radius_km = geo.speed_kmh(mode) * time_minutes / 60
    radius_deg = radius_km / KM_PER_DEGREE
    lng_scale = math.cos(math.radians(lat))

    points: List[List[float]] = []
    for i in range(ISOCHRONE_POINTS):
        angle = i * 2 * math.pi / ISOCHRONE_POINTS
        points.append([
            lat + radius_deg * math.cos(angle),
            lng + radius_deg * math.sin(angle) / lng_scale,
        ])

    points.append(list(points[0]))
    return points


routing_service = RoutingService()
