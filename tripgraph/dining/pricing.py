"""
Meal pricing and cuisine inference for the dining step.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from tripgraph.shared.contracts.itinerary_draft import MealType


@dataclass
class DiningPolicy:
    BUDGET_SHARE: float = 0.25
    DEFAULT_MEALS_PER_DAY: int = 3
    SEARCH_RADIUS_M: int = 1000
    FEEDBACK_DISCOUNT: float = 0.8


DEFAULT_POLICY = DiningPolicy()

MEAL_MULTIPLIERS: Dict[MealType, float] = {
    MealType.BREAKFAST: 0.5,
    MealType.LUNCH: 1.0,
    MealType.DINNER: 1.3,
    MealType.SNACK: 0.4,
}

MEAL_KEYWORDS: Dict[MealType, str] = {
    MealType.BREAKFAST: "breakfast dumpling bakery cafe",
    MealType.LUNCH: "restaurant noodles local",
    MealType.DINNER: "restaurant local cuisine",
    MealType.SNACK: "snacks dessert cafe",
}

# Substring of the venue category -> cuisine label, checked in order
CUISINE_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("火锅", "hotpot"),
    ("hotpot", "hotpot"),
    ("日本料理", "japanese"),
    ("japanese", "japanese"),
    ("sushi", "japanese"),
    ("韩国料理", "korean"),
    ("korean", "korean"),
    ("西餐", "western"),
    ("western", "western"),
    ("海鲜", "seafood"),
    ("seafood", "seafood"),
    ("粤菜", "cantonese"),
    ("cantonese", "cantonese"),
    ("中餐", "chinese"),
    ("chinese", "chinese"),
    ("local cuisine", "local"),
    ("快餐", "fast food"),
    ("noodle", "noodles"),
    ("面馆", "noodles"),
    ("小吃", "snacks"),
    ("snack", "snacks"),
    ("甜品", "dessert"),
    ("dessert", "dessert"),
    ("咖啡", "cafe"),
    ("cafe", "cafe"),
    ("茶馆", "tea house"),
)


def infer_cuisine(category: Optional[str]) -> Optional[str]:
    """Cuisine from the provider's category string; None when nothing matches."""
    if not category:
        return None
    text = category.lower()
    for keyword, cuisine in CUISINE_KEYWORDS:
        if keyword in text:
            return cuisine
    return None


def daily_dining_budget(budget: float, num_days: int, policy: DiningPolicy = DEFAULT_POLICY) -> float:
    return budget * policy.BUDGET_SHARE / max(num_days, 1)


def meal_price(
    meal_type: MealType,
    daily_budget: float,
    meals_per_day: int,
    discount: float = 1.0,
) -> float:
    """
    Per-person price estimate for one meal.

    The average meal price (daily budget / meals per day) scaled by the meal
    type multiplier, then by `discount` when cheaper meals were requested.
    """
    baseline = daily_budget / max(meals_per_day, 1)
    return round(baseline * MEAL_MULTIPLIERS[MealType(meal_type)] * discount, 2)
