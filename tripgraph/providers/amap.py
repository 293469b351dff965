"""
AMap (高德) web service adapter.

Implements the POI, routing and weather protocols on top of the AMap REST
API. Requires AMAP_API_KEY.
API docs: https://lbs.amap.com/api/webservice/summary
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from tripgraph.providers.interfaces import (
    CATEGORY_ATTRACTION,
    CATEGORY_HOTEL,
    CATEGORY_RESTAURANT,
    RouteEstimate,
    Venue,
)
from tripgraph.shared.contracts.weather_output import DayForecast
from tripgraph.shared.exceptions import ProviderError


logger = logging.getLogger(__name__)

BASE_URL = "https://restapi.amap.com"

# Category -> AMap POI type code
_TYPE_CODES: Dict[str, str] = {
    CATEGORY_ATTRACTION: "110000",
    CATEGORY_HOTEL: "100000",
    CATEGORY_RESTAURANT: "050000",
}

_INDOOR_KEYWORDS = ("博物馆", "展览馆", "美术馆", "商场", "购物", "科技馆", "剧院")

_ROUTE_PATHS: Dict[str, str] = {
    "walking": "/v3/direction/walking",
    "cycling": "/v4/direction/bicycling",
    "transit": "/v3/direction/transit/integrated",
    "driving": "/v3/direction/driving",
}


def _safe_str(val: object, default: str = "") -> str:
    """AMap returns [] instead of an empty string for missing fields."""
    if isinstance(val, str):
        return val
    if val is None or (isinstance(val, list) and len(val) == 0):
        return default
    return str(val)


def _safe_float(val: object) -> Optional[float]:
    text = _safe_str(val)
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_location(location: str) -> Optional[Tuple[float, float]]:
    """Parse AMap 'lng,lat' into (lat, lng)."""
    parts = _safe_str(location).split(",")
    if len(parts) != 2:
        return None
    try:
        return float(parts[1]), float(parts[0])
    except ValueError:
        return None


def _format_location(lat: float, lng: float) -> str:
    return f"{lng:.6f},{lat:.6f}"


def _poi_to_venue(raw: Dict[str, Any], idx: int) -> Venue:
    coords = parse_location(raw.get("location"))
    amap_type = _safe_str(raw.get("type"))
    biz_ext = raw.get("biz_ext") if isinstance(raw.get("biz_ext"), dict) else {}
    return Venue(
        id=_safe_str(raw.get("id"), f"amap_{idx}"),
        name=_safe_str(raw.get("name"), "unknown"),
        address=_safe_str(raw.get("address")) or None,
        lat=coords[0] if coords else None,
        lng=coords[1] if coords else None,
        category=amap_type,
        rating=_safe_float(biz_ext.get("rating")),
        price=_safe_float(biz_ext.get("cost")),
        distance_m=_safe_float(raw.get("distance")),
        indoor=any(kw in amap_type for kw in _INDOOR_KEYWORDS),
    )


class AmapClient:
    """POI, route and weather provider backed by the AMap web service."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        base_url: str = BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("AMAP_API_KEY is required for the AMap provider")
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        query = {"key": self.api_key, "output": "JSON", **params}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}{path}", params=query)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            raise ProviderError("amap", f"request to {path} failed: {e}") from e
        except ValueError as e:
            raise ProviderError("amap", f"invalid JSON from {path}: {e}") from e

        # v4 endpoints report errcode, v3 endpoints report status
        if "errcode" in payload:
            if payload.get("errcode") != 0:
                raise ProviderError("amap", f"{path} error {payload.get('errcode')}: {payload.get('errmsg')}")
        elif str(payload.get("status")) != "1":
            raise ProviderError("amap", f"{path} error {payload.get('infocode')}: {payload.get('info')}")
        return payload

    # ------------------------------------------------------------------
    # POI
    # ------------------------------------------------------------------

    async def search_nearby(
        self,
        lat: float,
        lng: float,
        keywords: str,
        category: str,
        radius: int = 3000,
        limit: int = 10,
    ) -> List[Venue]:
        payload = await self._get(
            "/v3/place/around",
            {
                "location": _format_location(lat, lng),
                "keywords": keywords,
                "types": _TYPE_CODES.get(category, ""),
                "radius": radius,
                "offset": limit,
                "sortrule": "distance",
                "extensions": "all",
            },
        )
        pois = payload.get("pois") or []
        return [_poi_to_venue(raw, i) for i, raw in enumerate(pois[:limit])]

    async def search_keyword(
        self,
        keywords: str,
        city: str,
        category: str,
        limit: int = 10,
    ) -> List[Venue]:
        payload = await self._get(
            "/v3/place/text",
            {
                "keywords": keywords,
                "city": city,
                "citylimit": "true",
                "types": _TYPE_CODES.get(category, ""),
                "offset": limit,
                "extensions": "all",
            },
        )
        pois = payload.get("pois") or []
        return [_poi_to_venue(raw, i) for i, raw in enumerate(pois[:limit])]

    async def geocode(self, address: str, city: str) -> Optional[Tuple[float, float]]:
        payload = await self._get("/v3/geocode/geo", {"address": address, "city": city})
        geocodes = payload.get("geocodes") or []
        if not geocodes:
            return None
        return parse_location(geocodes[0].get("location"))

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def estimate(
        self,
        origin: Tuple[float, float],
        destination: Tuple[float, float],
        mode: str,
        city: str,
    ) -> Optional[RouteEstimate]:
        path = _ROUTE_PATHS.get(mode)
        if path is None:
            raise ProviderError("amap", f"unsupported route mode '{mode}'")

        params: Dict[str, Any] = {
            "origin": _format_location(*origin),
            "destination": _format_location(*destination),
        }
        if mode == "transit":
            params["city"] = city
        payload = await self._get(path, params)

        if mode == "cycling":
            paths = (payload.get("data") or {}).get("paths") or []
            if not paths:
                return None
            best = paths[0]
            cost = None
        elif mode == "transit":
            transits = (payload.get("route") or {}).get("transits") or []
            if not transits:
                return None
            best = transits[0]
            cost = _safe_float(best.get("cost"))
        else:
            route = payload.get("route") or {}
            paths = route.get("paths") or []
            if not paths:
                return None
            best = paths[0]
            cost = _safe_float(route.get("taxi_cost")) if mode == "driving" else 0.0

        distance = _safe_float(best.get("distance")) or 0.0
        duration_s = _safe_float(best.get("duration")) or 0.0
        return RouteEstimate(mode=mode, distance_m=distance, duration_min=duration_s / 60.0, cost=cost)

    # ------------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------------

    async def get_forecast(self, city: str, start_date: str, end_date: str) -> List[DayForecast]:
        payload = await self._get("/v3/weather/weatherInfo", {"city": city, "extensions": "all"})
        forecasts = payload.get("forecasts") or []
        if not forecasts:
            return []
        result: List[DayForecast] = []
        for cast in forecasts[0].get("casts") or []:
            day = _safe_str(cast.get("date"))
            # AMap only forecasts a few days ahead; days outside the trip are dropped
            if not day or day < start_date or day > end_date:
                continue
            result.append(
                DayForecast(
                    date=day,
                    day_weather=_safe_str(cast.get("dayweather")),
                    night_weather=_safe_str(cast.get("nightweather")),
                    day_temp=_safe_float(cast.get("daytemp")),
                    night_temp=_safe_float(cast.get("nighttemp")),
                    day_wind=_safe_str(cast.get("daywind")) or None,
                    night_wind=_safe_str(cast.get("nightwind")) or None,
                )
            )
        logger.info(f"[provider=amap] Forecast for {city}: {len(result)} day(s) within {start_date}..{end_date}")
        return result
