"""
Price tier selection and nightly pricing for accommodation.

A share of the total budget is reserved for lodging; what that leaves
per person per night decides the tier, and preference tags can move it.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from tripgraph.shared.contracts.accommodation_output import PriceTier


@dataclass
class AccommodationPolicy:
    """Budget share, tier thresholds and nightly price ranges."""

    BUDGET_SHARE: float = 0.30
    ECONOMY_BELOW: float = 150.0
    MID_BELOW: float = 350.0
    MAX_RECOMMENDATIONS: int = 3
    SEARCH_RADIUS_M: int = 3000
    TRAVELERS_PER_ROOM: int = 2


DEFAULT_POLICY = AccommodationPolicy()

PRICE_RANGES: Dict[PriceTier, Tuple[float, float]] = {
    PriceTier.ECONOMY: (100.0, 200.0),
    PriceTier.MID: (200.0, 400.0),
    PriceTier.LUXURY: (400.0, 800.0),
}

TIER_ORDER = (PriceTier.ECONOMY, PriceTier.MID, PriceTier.LUXURY)

LUXURY_TAGS = {"luxury", "5-star", "five-star", "豪华", "奢华", "高端"}
ECONOMY_TAGS = {"budget", "economy", "hostel", "cheap", "经济", "经济型", "实惠"}

TIER_KEYWORDS: Dict[PriceTier, str] = {
    PriceTier.ECONOMY: "hostel economy hotel",
    PriceTier.MID: "hotel",
    PriceTier.LUXURY: "luxury hotel resort",
}


def stay_nights(num_days: int) -> int:
    return max(num_days - 1, 1)


def rooms_needed(travelers: int, policy: AccommodationPolicy = DEFAULT_POLICY) -> int:
    return max(1, math.ceil(travelers / policy.TRAVELERS_PER_ROOM))


def nightly_budget_per_person(
    budget: float,
    nights: int,
    travelers: int,
    policy: AccommodationPolicy = DEFAULT_POLICY,
) -> float:
    return budget * policy.BUDGET_SHARE / max(nights, 1) / max(travelers, 1)


def budget_tier(per_person_nightly: float, policy: AccommodationPolicy = DEFAULT_POLICY) -> PriceTier:
    if per_person_nightly < policy.ECONOMY_BELOW:
        return PriceTier.ECONOMY
    if per_person_nightly < policy.MID_BELOW:
        return PriceTier.MID
    return PriceTier.LUXURY


def select_tier(
    budget: float,
    nights: int,
    travelers: int,
    tags: Iterable[str],
    policy: AccommodationPolicy = DEFAULT_POLICY,
) -> PriceTier:
    """
    Choose the price tier.

    Economy tags always force economy. Luxury tags force luxury unless the
    budget itself already forces economy.
    """
    tier = budget_tier(nightly_budget_per_person(budget, nights, travelers, policy), policy)
    tags = {t.strip().lower() for t in tags}
    if tags & ECONOMY_TAGS:
        return PriceTier.ECONOMY
    if tags & LUXURY_TAGS and tier != PriceTier.ECONOMY:
        return PriceTier.LUXURY
    return tier


def downgrade(tier: PriceTier) -> PriceTier:
    """One tier cheaper; economy stays economy."""
    index = TIER_ORDER.index(PriceTier(tier))
    return TIER_ORDER[max(index - 1, 0)]


def nightly_price(tier: PriceTier, listed_price: Optional[float], rating: Optional[float]) -> float:
    """
    Price per room per night within the tier's range.

    A listed price is clamped into the range; without one the price is
    interpolated from the rating (3.0 -> floor, 5.0 -> ceiling).
    """
    low, high = PRICE_RANGES[PriceTier(tier)]
    if listed_price is not None and listed_price > 0:
        return round(min(max(listed_price, low), high), 2)
    quality = 0.5 if rating is None else min(max((rating - 3.0) / 2.0, 0.0), 1.0)
    return round(low + (high - low) * quality, 2)
