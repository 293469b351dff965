"""Geographic helpers: centroid and great-circle distance."""

import math
from typing import Iterable, Optional, Tuple

EARTH_RADIUS_KM = 6371.0


def is_valid_coordinate(lat: Optional[float], lng: Optional[float]) -> bool:
    if lat is None or lng is None:
        return False
    if math.isnan(lat) or math.isnan(lng):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def centroid(points: Iterable[Tuple[Optional[float], Optional[float]]]) -> Optional[Tuple[float, float]]:
    """
    Arithmetic mean of the valid (lat, lng) pairs.

    Returns None when no point carries valid coordinates.
    """
    valid = [(lat, lng) for lat, lng in points if is_valid_coordinate(lat, lng)]
    if not valid:
        return None
    lat = sum(p[0] for p in valid) / len(valid)
    lng = sum(p[1] for p in valid) / len(valid)
    return lat, lng


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    return haversine_km(lat1, lng1, lat2, lng2) * 1000.0
