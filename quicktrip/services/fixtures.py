"""Static places served when the point-of-interest index cannot be reached.

Distances and travel times are precomputed and are not recalculated
against the search origin.
"""

from typing import List, Optional

from quicktrip.models.schemas import Facility, Place, PlaceCategory, PriceRange

FIXTURE_PLACES: List[Place] = [
    Place(
        id="place_1",
        name="東京スカイツリー",
        category=PlaceCategory.TOURIST_ATTRACTION,
        latitude=35.7101,
        longitude=139.8107,
        address="東京都墨田区押上1-1-2",
        description="東京の新しいシンボルタワー",
        website="https://www.tokyo-skytree.jp/",
        opening_hours="8:00-22:00",
        price_range=PriceRange.UNDER_3000,
        facilities=[Facility.BARRIER_FREE, Facility.PARKING],
        is_open=True,
        distance=1200,
        travel_time=15,
    ),
    Place(
        id="place_2",
        name="上野公園",
        category=PlaceCategory.PARK,
        latitude=35.7148,
        longitude=139.7739,
        address="東京都台東区上野公園",
        description="桜の名所として有名な公園",
        website="https://www.kensetsu.metro.tokyo.jp/jimusho/toubuk/ueno/",
        opening_hours="24時間",
        price_range=PriceRange.FREE,
        facilities=[Facility.CHILD_FRIENDLY, Facility.PET_FRIENDLY],
        is_open=True,
        distance=800,
        travel_time=10,
    ),
    Place(
        id="place_3",
        name="スターバックス 銀座店",
        category=PlaceCategory.CAFE,
        latitude=35.6762,
        longitude=139.7639,
        address="東京都中央区銀座",
        description="銀座の中心にあるスターバックス",
        website="https://www.starbucks.co.jp/",
        opening_hours="7:00-22:00",
        price_range=PriceRange.UNDER_1000,
        facilities=[Facility.CHILD_FRIENDLY],
        is_open=True,
        distance=1500,
        travel_time=20,
    ),
]


def fixture_places() -> List[Place]:
    return [place.model_copy(deep=True) for place in FIXTURE_PLACES]


def get_fixture_place(place_id: str) -> Optional[Place]:
    for place in FIXTURE_PLACES:
        if place.id == place_id:
            return place.model_copy(deep=True)
    return None
