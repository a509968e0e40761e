import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import httpx

from quicktrip.core.config import settings
from quicktrip.core.exceptions import IndexUnavailableError
from quicktrip.models.schemas import Facility, Place, PlaceCategory, PriceRange
from quicktrip.services import geo

logger = logging.getLogger(__name__)

MAX_PLACES = 50

# (tag key, tag value); a value of None matches any value of the key.
TagPredicate = Tuple[str, Optional[str]]
Tags = Dict[str, str]

CATEGORY_PREDICATES: Dict[str, List[TagPredicate]] = {
    PlaceCategory.TOURIST_ATTRACTION.value: [("tourism", "attraction"), ("tourism", "museum")],
    PlaceCategory.RESTAURANT.value: [("amenity", "restaurant")],
    PlaceCategory.CAFE.value: [("amenity", "cafe")],
    PlaceCategory.PARK.value: [("leisure", "park")],
    PlaceCategory.LEISURE.value: [("amenity", "cinema"), ("amenity", "bar"), ("leisure", None)],
}

DEFAULT_PREDICATES: List[TagPredicate] = [
    ("amenity", "restaurant"),
    ("amenity", "cafe"),
    ("amenity", "bar"),
    ("amenity", "fast_food"),
    ("tourism", "attraction"),
    ("tourism", "museum"),
    ("leisure", "park"),
    ("shop", None),
]

LEISURE_AMENITIES = {"cinema", "theatre", "nightclub", "bar", "pub"}

# Evaluated top-down, first match wins.
CATEGORY_RULES: List[Tuple[Callable[[Tags], bool], PlaceCategory]] = [
    (lambda tags: bool(tags.get("tourism")), PlaceCategory.TOURIST_ATTRACTION),
    (lambda tags: tags.get("amenity") == "restaurant", PlaceCategory.RESTAURANT),
    (lambda tags: tags.get("amenity") == "cafe", PlaceCategory.CAFE),
    (lambda tags: tags.get("leisure") in ("park", "garden"), PlaceCategory.PARK),
    (lambda tags: bool(tags.get("shop")), PlaceCategory.LEISURE),
    (lambda tags: tags.get("amenity") in LEISURE_AMENITIES, PlaceCategory.LEISURE),
]
DEFAULT_CATEGORY = PlaceCategory.TOURIST_ATTRACTION

PRICE_RULES: List[Tuple[str, str, PriceRange]] = [
    ("amenity", "fast_food", PriceRange.UNDER_1000),
    ("amenity", "cafe", PriceRange.UNDER_1000),
    ("amenity", "restaurant", PriceRange.UNDER_3000),
    ("leisure", "park", PriceRange.FREE),
    ("tourism", "museum", PriceRange.UNDER_3000),
]
DEFAULT_PRICE_RANGE = PriceRange.UNDER_1000

ADDRESS_KEYS = ("addr:housenumber", "addr:street", "addr:city", "addr:postcode")


class OverpassService:
    """Point-of-interest lookups against the OpenStreetMap Overpass API.

    Failures are raised as ``IndexUnavailableError``; retrying is left to the
    caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        query_timeout: Optional[int] = None,
        request_timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or settings.OVERPASS_URL
        self.query_timeout = query_timeout or settings.OVERPASS_QUERY_TIMEOUT
        self.request_timeout = request_timeout or settings.OVERPASS_REQUEST_TIMEOUT
        self.user_agent = user_agent or settings.OVERPASS_USER_AGENT
        self._transport = transport

    async def search(
        self,
        lat: float,
        lng: float,
        radius_meters: float,
        categories: Optional[Sequence[str]] = None,
    ) -> List[Place]:
        bbox = geo.bounding_box(lat, lng, radius_meters)
        query = self.build_query(bbox, categories)
        logger.debug("Overpass query: %s", query)

        data = await self._fetch(query)
        elements = data.get("elements", [])
        if not isinstance(elements, list):
            raise IndexUnavailableError("Overpass response has no element list")

        logger.info("Overpass returned %s elements", len(elements))
        try:
            return self.parse_elements(elements, lat, lng)
        except (AttributeError, TypeError, ValueError) as exc:
            raise IndexUnavailableError(f"Overpass returned malformed elements: {exc}") from exc

    def build_query(self, bbox: geo.BoundingBox, categories: Optional[Sequence[str]] = None) -> str:
        predicates = resolve_predicates(categories)
        area = bbox.as_overpass()
        statements = "".join(_render_predicate(key, value, area) for key, value in predicates)
        return f"[out:json][timeout:{self.query_timeout}];\n({statements});\nout geom;"

    async def _fetch(self, query: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.request_timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    self.base_url,
                    content=query.encode("utf-8"),
                    headers={"Content-Type": "text/plain", "User-Agent": self.user_agent},
                )
            except httpx.HTTPError as exc:
                logger.error("Overpass request failed: %s", exc)
                raise IndexUnavailableError(f"Overpass request failed: {exc}") from exc

        if not response.is_success:
            logger.error("Overpass error %s: %s", response.status_code, response.text[:500])
            raise IndexUnavailableError(
                f"Overpass API error: {response.status_code}",
                status=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise IndexUnavailableError(
                "Overpass returned an unparseable body",
                status=response.status_code,
                body=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise IndexUnavailableError("Overpass returned an unexpected body", status=response.status_code)
        return data

    def parse_elements(
        self,
        elements: Iterable[Dict[str, Any]],
        center_lat: float,
        center_lng: float,
    ) -> List[Place]:
        places: List[Place] = []
        seen = set()

        for element in elements:
            if not isinstance(element, dict):
                continue

            tags = element.get("tags") or {}
            name = (tags.get("name") or "").strip()
            lat, lon = element.get("lat"), element.get("lon")
            osm_id = element.get("id")
            if not name or lat is None or lon is None or osm_id is None:
                continue

            place_id = f"osm_{element.get('type', 'node')}_{osm_id}"
            if place_id in seen:
                continue
            seen.add(place_id)

            distance = geo.haversine_distance(center_lat, center_lng, lat, lon)
            places.append(
                Place(
                    id=place_id,
                    name=name,
                    category=map_category(tags),
                    latitude=lat,
                    longitude=lon,
                    address=build_address(tags),
                    description=build_description(tags),
                    website=tags.get("website") or None,
                    opening_hours=tags.get("opening_hours") or None,
                    price_range=estimate_price_range(tags),
                    facilities=extract_facilities(tags),
                    is_open=True,
                    distance=round(distance),
                    travel_time=0,
                )
            )

        places.sort(key=lambda place: place.distance)
        logger.info("✓ Parsed %s named places (kept %s)", len(places), min(len(places), MAX_PLACES))
        return places[:MAX_PLACES]


def resolve_predicates(categories: Optional[Sequence[str]]) -> List[TagPredicate]:
    predicates: List[TagPredicate] = []
    for category in categories or []:
        for predicate in CATEGORY_PREDICATES.get(getattr(category, "value", category), []):
            if predicate not in predicates:
                predicates.append(predicate)
    return predicates or list(DEFAULT_PREDICATES)


def _render_predicate(key: str, value: Optional[str], area: str) -> str:
    if value is None:
        return f'node["{key}"]({area});'
    return f'node["{key}"="{value}"]({area});'


def map_category(tags: Tags) -> PlaceCategory:
    for matches, category in CATEGORY_RULES:
        if matches(tags):
            return category
    return DEFAULT_CATEGORY


def build_address(tags: Tags) -> str:
    return " ".join(tags[key] for key in ADDRESS_KEYS if tags.get(key))


def build_description(tags: Tags) -> str:
    parts = [tags[key] for key in ("amenity", "tourism", "leisure") if tags.get(key)]
    if tags.get("shop"):
        parts.append(f"{tags['shop']} shop")
    if tags.get("cuisine"):
        parts.append(f"Cuisine: {tags['cuisine']}")
    return ", ".join(parts)


def estimate_price_range(tags: Tags) -> PriceRange:
    for key, value, price in PRICE_RULES:
        if tags.get(key) == value:
            return price
    return DEFAULT_PRICE_RANGE


def extract_facilities(tags: Tags) -> List[Facility]:
    facilities: List[Facility] = []
    if tags.get("wheelchair") == "yes":
        facilities.append(Facility.BARRIER_FREE)
    return facilities


overpass_service = OverpassService()
