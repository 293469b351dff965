"""
Offline providers for development and tests.

Generate deterministic but destination-aware POIs, routes and forecasts
so the whole workflow runs without network access or API keys. The same
inputs always produce the same outputs.
"""

import hashlib
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from tripgraph.providers.interfaces import (
    CATEGORY_HOTEL,
    CATEGORY_RESTAURANT,
    Providers,
    RouteEstimate,
    Venue,
)
from tripgraph.shared.contracts.weather_output import DayForecast
from tripgraph.shared.geo import haversine_m


_CITY_CENTERS: Dict[str, Tuple[float, float]] = {
    "hangzhou": (30.2741, 120.1551),
    "杭州": (30.2741, 120.1551),
    "beijing": (39.9042, 116.4074),
    "北京": (39.9042, 116.4074),
    "shanghai": (31.2304, 121.4737),
    "上海": (31.2304, 121.4737),
    "chengdu": (30.5728, 104.0668),
    "成都": (30.5728, 104.0668),
    "xi'an": (34.3416, 108.9398),
    "西安": (34.3416, 108.9398),
}

# (name, type, price, rating, indoor, lat offset, lng offset)
_ATTRACTIONS = [
    ("City Museum", "museum", 0.0, 4.7, True, 0.004, 0.003),
    ("Old Town Quarter", "historic district", 0.0, 4.5, False, -0.006, 0.002),
    ("Botanical Garden", "park", 20.0, 4.4, False, 0.012, -0.010),
    ("Modern Art Gallery", "gallery", 30.0, 4.3, True, 0.002, -0.004),
    ("Skyline Tower", "landmark", 80.0, 4.6, False, -0.003, -0.008),
    ("Lakeside Park", "park", 0.0, 4.8, False, 0.020, 0.015),
    ("Science Center", "science museum", 60.0, 4.2, True, -0.018, 0.020),
    ("Grand Theater", "theater", 120.0, 4.1, True, 0.009, 0.011),
    ("Adventure Theme Park", "amusement park", 200.0, 4.5, False, 0.050, -0.040),
]

_HOTELS = [
    ("Backpackers Hostel", "hostel", 128.0, 4.0, 0.003, 0.004),
    ("Metro Express Inn", "economy hotel", 168.0, 4.2, -0.004, 0.001),
    ("Garden Court Hotel", "hotel", 268.0, 4.4, 0.006, -0.005),
    ("Riverside Suites", "hotel", 358.0, 4.5, -0.008, -0.006),
    ("Lakeview Grand Hotel", "luxury hotel", 588.0, 4.7, 0.010, 0.009),
    ("Imperial Palace Resort", "luxury resort", 880.0, 4.9, -0.012, 0.013),
]

_RESTAURANTS = [
    ("Morning Dumpling House", "snacks", 18.0, 4.3, 0.001, 0.002),
    ("Daily Noodle Bar", "noodles", 25.0, 4.1, -0.002, 0.001),
    ("Corner Bakery Cafe", "cafe", 35.0, 4.2, 0.002, -0.002),
    ("Old Street Local Kitchen", "local cuisine", 65.0, 4.6, -0.001, -0.003),
    ("Golden Dim Sum", "cantonese", 80.0, 4.5, 0.003, 0.003),
    ("Red Pepper Hotpot", "hotpot", 110.0, 4.7, -0.003, 0.002),
    ("Harbor Seafood Grill", "seafood", 150.0, 4.4, 0.004, -0.001),
    ("Sakura Sushi", "japanese", 130.0, 4.3, -0.004, -0.004),
]

_CONDITIONS = ["Sunny", "Cloudy", "Overcast", "Light rain", "Sunny", "Cloudy"]


def _stable_int(text: str) -> int:
    return int(hashlib.md5(text.encode("utf-8")).hexdigest()[:8], 16)


def city_center(city: str) -> Tuple[float, float]:
    """Known coordinates for common cities, otherwise a stable synthetic point."""
    key = city.strip().lower()
    if key in _CITY_CENTERS:
        return _CITY_CENTERS[key]
    seed = _stable_int(key)
    return 22.0 + (seed % 1800) / 100.0, 102.0 + (seed // 1800 % 1800) / 100.0


def _matches(keywords: str, name: str, category: str) -> bool:
    terms = [t.strip().lower() for t in keywords.replace("|", " ").split() if t.strip()]
    haystack = f"{name} {category}".lower()
    return any(t in haystack for t in terms)


def _build_venues(category: str, lat: float, lng: float, prefix: str) -> List[Venue]:
    venues: List[Venue] = []
    if category == CATEGORY_HOTEL:
        for i, (name, kind, price, rating, d_lat, d_lng) in enumerate(_HOTELS):
            venues.append(Venue(
                id=f"{prefix}-hotel-{i}", name=name, address=f"{i + 1} Hotel Road",
                lat=lat + d_lat, lng=lng + d_lng, category=kind, rating=rating, price=price,
            ))
    elif category == CATEGORY_RESTAURANT:
        for i, (name, kind, price, rating, d_lat, d_lng) in enumerate(_RESTAURANTS):
            venues.append(Venue(
                id=f"{prefix}-food-{i}", name=name, address=f"{i + 10} Food Street",
                lat=lat + d_lat, lng=lng + d_lng, category=kind, rating=rating, price=price,
            ))
    else:
        for i, (name, kind, price, rating, indoor, d_lat, d_lng) in enumerate(_ATTRACTIONS):
            venues.append(Venue(
                id=f"{prefix}-poi-{i}", name=name, address=f"{i + 100} Scenic Avenue",
                lat=lat + d_lat, lng=lng + d_lng, category=kind, rating=rating, price=price,
                indoor=indoor,
            ))
    return venues


class MockPoiProvider:
    """Deterministic POI search around known or synthetic city centers."""

    async def search_keyword(
        self,
        keywords: str,
        city: str,
        category: str,
        limit: int = 10,
    ) -> List[Venue]:
        lat, lng = city_center(city)
        venues = _build_venues(category, lat, lng, prefix=city.strip().lower() or "city")
        matched = [v for v in venues if _matches(keywords, v.name, v.category)]
        result = matched or venues
        result.sort(key=lambda v: v.rating or 0.0, reverse=True)
        return result[:limit]

    async def search_nearby(
        self,
        lat: float,
        lng: float,
        keywords: str,
        category: str,
        radius: int = 3000,
        limit: int = 10,
    ) -> List[Venue]:
        venues = _build_venues(category, lat, lng, prefix=f"{lat:.3f},{lng:.3f}")
        # Rotate so that different neighbourhoods surface different venues
        shift = _stable_int(f"{lat:.3f},{lng:.3f}") % len(venues)
        venues = venues[shift:] + venues[:shift]
        for venue in venues:
            venue.distance_m = round(haversine_m(lat, lng, venue.lat, venue.lng), 1)
        nearby = [v for v in venues if v.distance_m <= radius]
        nearby.sort(key=lambda v: v.distance_m)
        return nearby[:limit]

    async def geocode(self, address: str, city: str) -> Optional[Tuple[float, float]]:
        lat, lng = city_center(city)
        seed = _stable_int(f"{city}|{address}")
        return lat + ((seed % 400) - 200) / 10000.0, lng + ((seed // 400 % 400) - 200) / 10000.0


# Average speeds in km/h
_SPEEDS = {"walking": 5.0, "cycling": 15.0, "transit": 25.0, "driving": 30.0}
_DETOUR_FACTOR = 1.3


class MockRouteProvider:
    """Routes estimated from straight-line distance with a detour factor."""

    async def estimate(
        self,
        origin: Tuple[float, float],
        destination: Tuple[float, float],
        mode: str,
        city: str,
    ) -> Optional[RouteEstimate]:
        speed = _SPEEDS.get(mode)
        if speed is None:
            return None
        distance = haversine_m(origin[0], origin[1], destination[0], destination[1]) * _DETOUR_FACTOR
        duration = distance / 1000.0 / speed * 60.0
        return RouteEstimate(mode=mode, distance_m=round(distance, 1), duration_min=round(duration, 1))


class MockWeatherProvider:
    """Stable synthetic forecast per city and date."""

    async def get_forecast(self, city: str, start_date: str, end_date: str) -> List[DayForecast]:
        start = date.fromisoformat(start_date)
        end = date.fromisoformat(end_date)
        base_temp = 14.0 + _stable_int(city.strip().lower()) % 12
        forecasts: List[DayForecast] = []
        current = start
        while current <= end:
            seed = _stable_int(f"{city}|{current.isoformat()}")
            condition = _CONDITIONS[seed % len(_CONDITIONS)]
            high = base_temp + seed % 7
            forecasts.append(
                DayForecast(
                    date=current.isoformat(),
                    day_weather=condition,
                    night_weather="Cloudy" if "rain" not in condition.lower() else condition,
                    day_temp=float(high),
                    night_temp=float(high - 6 - seed % 4),
                    day_wind="NE",
                    night_wind="NE",
                )
            )
            current += timedelta(days=1)
        return forecasts


def create_mock_providers() -> Providers:
    return Providers(poi=MockPoiProvider(), routes=MockRouteProvider(), weather=MockWeatherProvider())
