"""
Map Geoapify feature collections onto the provider-agnostic Cafe record.

Geoapify's free tier carries no ratings, photos or parsed opening hours, so
those fields always come out as None / unknown.
"""
from typing import Iterable, List, Mapping, Optional, Tuple

from geopy.distance import geodesic

from cafe_finder.models import Cafe, OpenStatus

DEFAULT_NAME = "Unnamed Cafe"
DEFAULT_ADDRESS = "Address not available"
DEFAULT_CATEGORY = "Cafe"

# Candidate address fields, best first. First non-empty value wins.
ADDRESS_FIELDS = ("formatted", "address_line2", "street")


def pick_address(properties: Mapping) -> str:
    for field in ADDRESS_FIELDS:
        value = properties.get(field)
        if value:
            return value
    return DEFAULT_ADDRESS


def derive_category(categories: Optional[Iterable[str]]) -> str:
    """Second segment of the first dotted path: "catering.cafe.x" -> "cafe"."""
    if not categories:
        return DEFAULT_CATEGORY
    first = next(iter(categories), None)
    if not first:
        return DEFAULT_CATEGORY
    segments = first.split(".")
    if len(segments) < 2 or not segments[1]:
        return DEFAULT_CATEGORY
    return segments[1]


def _distance_m(origin: Optional[Tuple[float, float]], lat, lng) -> Optional[int]:
    if origin is None or lat is None or lng is None:
        return None
    try:
        return round(geodesic(origin, (lat, lng)).meters)
    except ValueError:
        return None


def normalize_feature(
    feature: Mapping, origin: Optional[Tuple[float, float]] = None
) -> Cafe:
    p = feature.get("properties") or {}
    lat = p.get("lat")
    lng = p.get("lon")

    return Cafe(
        name=p.get("name") or DEFAULT_NAME,
        address=pick_address(p),
        lat=lat,
        lng=lng,
        rating=None,
        category=derive_category(p.get("categories")),
        open_status=OpenStatus.UNKNOWN,
        photo_url=None,
        distance_m=_distance_m(origin, lat, lng),
    )


def normalize_features(
    collection: Mapping, origin: Optional[Tuple[float, float]] = None
) -> List[Cafe]:
    features = collection.get("features") or []
    return [normalize_feature(f, origin) for f in features]
