"""
Collaborator protocols and their I/O models.

Steps only talk to POI search, routing and weather through these
protocols, so the AMap adapter and the offline providers are
interchangeable.
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from pydantic import BaseModel, Field

from tripgraph.shared.contracts.weather_output import DayForecast

# POI categories understood by every provider
CATEGORY_ATTRACTION = "attraction"
CATEGORY_HOTEL = "hotel"
CATEGORY_RESTAURANT = "restaurant"


class Venue(BaseModel):
    """A point of interest returned by a POI provider."""

    id: str
    name: str
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    category: str = Field(default="", description="Provider type string, e.g. '博物馆' or 'museum'")
    rating: Optional[float] = None
    price: Optional[float] = Field(default=None, description="Typical price per person or per night")
    distance_m: Optional[float] = None
    indoor: Optional[bool] = None

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lng is not None


class RouteEstimate(BaseModel):
    mode: str
    distance_m: float = Field(ge=0)
    duration_min: float = Field(ge=0)
    cost: Optional[float] = Field(default=None, description="Fare per person, when the provider knows it")


@runtime_checkable
class PoiProvider(Protocol):
    async def search_nearby(
        self,
        lat: float,
        lng: float,
        keywords: str,
        category: str,
        radius: int = 3000,
        limit: int = 10,
    ) -> List[Venue]:
        ...

    async def search_keyword(
        self,
        keywords: str,
        city: str,
        category: str,
        limit: int = 10,
    ) -> List[Venue]:
        ...

    async def geocode(self, address: str, city: str) -> Optional[Tuple[float, float]]:
        ...


@runtime_checkable
class RouteProvider(Protocol):
    async def estimate(
        self,
        origin: Tuple[float, float],
        destination: Tuple[float, float],
        mode: str,
        city: str,
    ) -> Optional[RouteEstimate]:
        ...


@runtime_checkable
class WeatherProvider(Protocol):
    async def get_forecast(self, city: str, start_date: str, end_date: str) -> List[DayForecast]:
        ...


@dataclass
class Providers:
    """The collaborators injected into every step."""

    poi: PoiProvider
    routes: RouteProvider
    weather: WeatherProvider
