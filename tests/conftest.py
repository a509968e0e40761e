import os
import sys
from pathlib import Path

os.environ.setdefault("OPENROUTESERVICE_API_KEY", "test-ors-key")
os.environ.setdefault("OVERPASS_MAX_ATTEMPTS", "1")
os.environ.setdefault("ENVIRONMENT", "test")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from typing import Any, Dict, Optional

from quicktrip.models.schemas import Place, PlaceCategory, PriceRange

ORIGIN = (35.6762, 139.6503)


def make_place(
    index: int,
    *,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    distance: Optional[int] = None,
    **overrides: Any,
) -> Place:
    # Each index steps roughly 111 m north of the origin.
    values: Dict[str, Any] = {
        "id": f"osm_node_{index}",
        "name": f"Place {index}",
        "category": PlaceCategory.CAFE,
        "latitude": lat if lat is not None else ORIGIN[0] + 0.001 * index,
        "longitude": lon if lon is not None else ORIGIN[1],
        "price_range": PriceRange.UNDER_1000,
        "distance": distance if distance is not None else 111 * index,
    }
    values.update(overrides)
    return Place(**values)

