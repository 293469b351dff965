"""Pydantic contracts for every slice of the workflow state."""

from tripgraph.shared.contracts.trip_request import TripRequest, trip_dates
from tripgraph.shared.contracts.weather_output import DayForecast, StrategyTag, WeatherOutput
from tripgraph.shared.contracts.itinerary_draft import (
    AttractionSlot,
    DraftDay,
    DraftItinerary,
    Location,
    MealSlot,
    MealType,
)
from tripgraph.shared.contracts.accommodation_output import (
    AccommodationResult,
    HotelRecommendation,
    PriceTier,
)
from tripgraph.shared.contracts.transport_output import (
    TransportMode,
    TransportResult,
    TransportSegment,
)
from tripgraph.shared.contracts.dining_output import DiningRecommendation, DiningResult
from tripgraph.shared.contracts.budget_result import (
    BudgetFeedback,
    BudgetFeedbackAction,
    BudgetResult,
    CostBreakdown,
)
from tripgraph.shared.contracts.final_itinerary import FinalItinerary
from tripgraph.shared.contracts.execution_meta import (
    AgentError,
    AgentExecution,
    ExecutionStatus,
    ToolCall,
)

__all__ = [
    "TripRequest",
    "trip_dates",
    "DayForecast",
    "StrategyTag",
    "WeatherOutput",
    "AttractionSlot",
    "DraftDay",
    "DraftItinerary",
    "Location",
    "MealSlot",
    "MealType",
    "AccommodationResult",
    "HotelRecommendation",
    "PriceTier",
    "TransportMode",
    "TransportResult",
    "TransportSegment",
    "DiningRecommendation",
    "DiningResult",
    "BudgetFeedback",
    "BudgetFeedbackAction",
    "BudgetResult",
    "CostBreakdown",
    "FinalItinerary",
    "AgentError",
    "AgentExecution",
    "ExecutionStatus",
    "ToolCall",
]
