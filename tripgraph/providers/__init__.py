"""
External collaborators: POI search, routing and weather.

- interfaces: protocols and I/O models the steps depend on
- amap: AMap web service adapter
- mock_data: deterministic offline providers
- factory: provider and LLM selection from configuration
"""

from tripgraph.providers.interfaces import (
    CATEGORY_ATTRACTION,
    CATEGORY_HOTEL,
    CATEGORY_RESTAURANT,
    PoiProvider,
    Providers,
    RouteEstimate,
    RouteProvider,
    Venue,
    WeatherProvider,
)

__all__ = [
    "CATEGORY_ATTRACTION",
    "CATEGORY_HOTEL",
    "CATEGORY_RESTAURANT",
    "PoiProvider",
    "Providers",
    "RouteEstimate",
    "RouteProvider",
    "Venue",
    "WeatherProvider",
]
