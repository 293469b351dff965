"""
Tests for the dining step: meal pricing, cuisine inference and the search chain.
"""

import asyncio

import pytest

from tripgraph.dining.nodes.dining import anchor_location, dining_node
from tripgraph.dining.pricing import daily_dining_budget, infer_cuisine, meal_price
from tripgraph.shared.contracts.itinerary_draft import MealType
from tripgraph.tests.fakes import (
    EmptyPoiProvider,
    attraction,
    hangzhou_draft,
    make_ctx,
    make_draft,
    make_request,
    make_state,
    over_budget_result,
    providers_with_poi,
)


class TestMealPrice:
    """Average meal price scaled per meal type."""

    def test_multipliers(self):
        # 300 per day over 3 meals -> 100 baseline
        assert meal_price(MealType.BREAKFAST, 300.0, 3) == 50.0
        assert meal_price(MealType.LUNCH, 300.0, 3) == 100.0
        assert meal_price(MealType.DINNER, 300.0, 3) == 130.0
        assert meal_price(MealType.SNACK, 300.0, 3) == 40.0

    def test_accepts_string_meal_type(self):
        assert meal_price("dinner", 300.0, 3) == 130.0

    def test_discount(self):
        assert meal_price(MealType.LUNCH, 300.0, 3, discount=0.8) == 80.0

    def test_daily_budget_share(self):
        assert daily_dining_budget(1200.0, 3) == pytest.approx(100.0)


class TestCuisineInference:
    def test_known_keywords(self):
        assert infer_cuisine("hotpot") == "hotpot"
        assert infer_cuisine("餐饮服务;中餐厅;火锅店") == "hotpot"
        assert infer_cuisine("Japanese Restaurant") == "japanese"
        assert infer_cuisine("餐饮服务;中餐厅;粤菜馆") == "cantonese"

    def test_unmatched_is_unset(self):
        assert infer_cuisine("restaurant") is None
        assert infer_cuisine("") is None
        assert infer_cuisine(None) is None


class TestAnchorLocation:
    def test_latest_attraction_before_meal(self):
        draft = make_draft([[
            attraction("A", "09:00", 30.0, 120.0),
            attraction("B", "13:30", 30.1, 120.1),
        ]])
        day = draft["days"][0]
        assert anchor_location(day, "12:00") == (30.0, 120.0)
        assert anchor_location(day, "18:00") == (30.1, 120.1)
        assert anchor_location(day, "08:00") is None


class TestDiningNode:
    def test_no_draft_returns_neutral(self):
        update = asyncio.run(dining_node(make_state(), make_ctx("dining")))
        assert update["dining"]["recommendations"] == []
        assert update["dining"]["total_cost"] == 0.0

    def test_one_restaurant_per_meal(self):
        state = make_state(make_request(budget=1200.0, travelers=2), draft_itinerary=hangzhou_draft())
        update = asyncio.run(dining_node(state, make_ctx("dining")))
        recs = update["dining"]["recommendations"]
        assert len(recs) == 9
        # 1200 * 0.25 / 3 days = 100 per day, 3 meals -> baseline 33.33
        lunch = next(r for r in recs if r["meal_type"] == "lunch")
        assert lunch["avg_price"] == pytest.approx(33.33)
        expected_total = round(sum(r["avg_price"] for r in recs) * 2, 2)
        assert update["dining"]["total_cost"] == pytest.approx(expected_total)

    def test_cuisine_from_provider_category(self):
        state = make_state(draft_itinerary=hangzhou_draft())
        recs = asyncio.run(dining_node(state, make_ctx("dining")))["dining"]["recommendations"]
        known = {"hotpot", "japanese", "seafood", "cantonese", "local", "noodles", "snacks", "cafe", None}
        assert all(r["cuisine"] in known for r in recs)

    def test_no_restaurants_found(self):
        poi = EmptyPoiProvider()
        state = make_state(draft_itinerary=hangzhou_draft())
        update = asyncio.run(dining_node(state, make_ctx("dining", providers_with_poi(poi))))
        assert update["dining"]["recommendations"] == []
        assert update["dining"]["total_cost"] == 0.0
        assert "nearby" in poi.calls and "keyword" in poi.calls

    def test_adjust_meals_feedback_never_costs_more(self):
        request = make_request(budget=3000.0)
        first = asyncio.run(
            dining_node(make_state(request, draft_itinerary=hangzhou_draft()), make_ctx("dining"))
        )["dining"]
        state = make_state(
            request,
            draft_itinerary=hangzhou_draft(attempt=1),
            dining=first,
            budget_result=over_budget_result("adjust_meals"),
            retry_count=1,
        )
        second = asyncio.run(dining_node(state, make_ctx("dining")))["dining"]
        assert second["total_cost"] <= first["total_cost"]
        assert second["total_cost"] == pytest.approx(first["total_cost"] * 0.8, rel=0.01)
        assert second["attempt"] == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
