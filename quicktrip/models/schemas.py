from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class TransportMode(str, Enum):
    WALKING = "walking"
    DRIVING = "driving"
    CYCLING = "cycling"
    TRANSIT = "transit"


class PlaceCategory(str, Enum):
    TOURIST_ATTRACTION = "tourist_attraction"
    LEISURE = "leisure"
    PARK = "park"
    RESTAURANT = "restaurant"
    CAFE = "cafe"


class PriceRange(str, Enum):
    FREE = "free"
    UNDER_1000 = "under_1000"
    UNDER_3000 = "under_3000"
    OVER_3000 = "over_3000"


class Facility(str, Enum):
    CHILD_FRIENDLY = "child_friendly"
    PET_FRIENDLY = "pet_friendly"
    PARKING = "parking"
    BARRIER_FREE = "barrier_free"


class SearchRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    time_minutes: int = Field(..., ge=5, le=180, description="Travel time budget")
    transport: TransportMode
    categories: Optional[List[str]] = Field(default=None, description="Requested place categories")
    price_range: Optional[PriceRange] = None
    facilities: Optional[List[str]] = None
    open_now: Optional[bool] = None


class Place(BaseModel):
    id: str
    name: str
    category: PlaceCategory
    latitude: float
    longitude: float
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    opening_hours: Optional[str] = None
    price_range: PriceRange = PriceRange.UNDER_1000
    facilities: List[Facility] = []
    is_open: bool = True
    distance: int = Field(..., ge=0, description="Meters from the search origin")
    travel_time: int = Field(default=0, ge=0, description="Minutes from the search origin, 0 until resolved")


class Coordinates(BaseModel):
    latitude: float
    longitude: float


class SearchResponse(BaseModel):
    places: List[Place]
    center: Coordinates
    radius: int


class IsochroneRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    time_minutes: int = Field(..., ge=5, le=180)
    transport: TransportMode = TransportMode.WALKING


class IsochroneResponse(BaseModel):
    center: Coordinates
    time_minutes: int
    transport: TransportMode
    polygon: List[List[float]]
