"""
Tests for the accommodation step: tiers, centroid biasing, feedback and degradation.
"""

import asyncio

import pytest

from tripgraph.accommodation.nodes.accommodation import (
    accommodation_neutral,
    accommodation_node,
    attraction_centroid,
    build_recommendations,
)
from tripgraph.accommodation.pricing import (
    downgrade,
    nightly_price,
    rooms_needed,
    select_tier,
    stay_nights,
)
from tripgraph.graph.steps import create_step_node
from tripgraph.providers.interfaces import Venue
from tripgraph.shared.contracts.accommodation_output import AccommodationResult, PriceTier
from tripgraph.shared.contracts.itinerary_draft import Location
from tripgraph.shared.geo import centroid
from tripgraph.tests.fakes import (
    EmptyPoiProvider,
    FailingPoiProvider,
    attraction,
    hangzhou_draft,
    make_ctx,
    make_draft,
    make_request,
    make_state,
    over_budget_result,
    providers_with_poi,
)


# ============================================================================
# Centroid
# ============================================================================


class TestCentroid:
    def test_mean_of_two_points(self):
        lat, lng = centroid([(30.0, 120.0), (30.2, 120.2)])
        assert lat == pytest.approx(30.1)
        assert lng == pytest.approx(120.1)

    def test_no_valid_points(self):
        assert centroid([]) is None
        assert centroid([(None, None), (95.0, 10.0)]) is None

    def test_draft_centroid_skips_unlocated(self):
        draft = make_draft([[
            attraction("A", "09:00", 30.0, 120.0),
            attraction("B", "11:00"),
            attraction("C", "13:30", 30.2, 120.2),
        ]])
        center = attraction_centroid(draft)
        assert center.lat == pytest.approx(30.1)
        assert center.lng == pytest.approx(120.1)

    def test_draft_without_locations(self):
        draft = make_draft([[attraction("A", "09:00")]])
        assert attraction_centroid(draft) is None


# ============================================================================
# Pricing
# ============================================================================


class TestTierSelection:
    def test_low_budget_is_economy(self):
        # 1000 * 0.3 / 2 nights / 2 people = 75
        assert select_tier(1000.0, 2, 2, []) == PriceTier.ECONOMY

    def test_medium_budget_is_mid(self):
        # 3000 * 0.3 / 2 / 2 = 225
        assert select_tier(3000.0, 2, 2, []) == PriceTier.MID

    def test_high_budget_is_luxury(self):
        assert select_tier(10000.0, 2, 2, []) == PriceTier.LUXURY

    def test_luxury_tag_with_sufficient_budget(self):
        assert select_tier(3000.0, 2, 2, ["luxury"]) == PriceTier.LUXURY

    def test_luxury_tag_cannot_beat_low_budget(self):
        assert select_tier(1000.0, 2, 2, ["luxury"]) == PriceTier.ECONOMY

    def test_economy_tag_forces_economy(self):
        assert select_tier(10000.0, 2, 2, ["Budget"]) == PriceTier.ECONOMY

    def test_downgrade(self):
        assert downgrade(PriceTier.LUXURY) == PriceTier.MID
        assert downgrade(PriceTier.MID) == PriceTier.ECONOMY
        assert downgrade(PriceTier.ECONOMY) == PriceTier.ECONOMY


class TestStayMath:
    def test_nights(self):
        assert stay_nights(3) == 2
        assert stay_nights(1) == 1

    def test_rooms(self):
        assert rooms_needed(1) == 1
        assert rooms_needed(2) == 1
        assert rooms_needed(3) == 2

    def test_listed_price_is_clamped_to_tier(self):
        assert nightly_price(PriceTier.ECONOMY, 500.0, 4.0) == 200.0
        assert nightly_price(PriceTier.LUXURY, 128.0, 4.0) == 400.0
        assert nightly_price(PriceTier.MID, 268.0, 4.0) == 268.0

    def test_unlisted_price_follows_rating(self):
        assert nightly_price(PriceTier.MID, None, 3.0) == 200.0
        assert nightly_price(PriceTier.MID, None, 5.0) == 400.0
        assert nightly_price(PriceTier.MID, None, None) == 300.0


class TestRecommendations:
    def _venues(self):
        return [
            Venue(id="far", name="Far Hotel", lat=30.30, lng=120.30, rating=4.9, price=300.0),
            Venue(id="near", name="Near Hotel", lat=30.101, lng=120.101, rating=4.0, price=250.0),
            Venue(id="none", name="Unlocated Hotel", rating=5.0, price=220.0),
        ]

    def test_sorted_by_distance_to_centroid(self):
        recs = build_recommendations(self._venues(), PriceTier.MID, Location(lat=30.1, lng=120.1), 3)
        assert [r.name for r in recs] == ["Near Hotel", "Far Hotel", "Unlocated Hotel"]
        assert recs[0].distance_km < recs[1].distance_km
        assert recs[2].distance_km is None

    def test_unranked_without_centroid(self):
        recs = build_recommendations(self._venues(), PriceTier.MID, None, 3)
        assert [r.name for r in recs] == ["Far Hotel", "Near Hotel", "Unlocated Hotel"]
        assert all(r.distance_km is None for r in recs)

    def test_limit(self):
        assert len(build_recommendations(self._venues(), PriceTier.MID, None, 2)) == 2


# ============================================================================
# Node
# ============================================================================


class TestAccommodationNode:
    def test_no_draft_returns_neutral(self):
        ctx = make_ctx("accommodation")
        update = asyncio.run(accommodation_node(make_state(), ctx))
        result = update["accommodation"]
        assert result["recommendations"] == []
        assert result["total_cost"] == 0.0
        assert ctx.skipped is True

    def test_recommends_and_costs_stay(self):
        state = make_state(make_request(travelers=3), draft_itinerary=hangzhou_draft())
        update = asyncio.run(accommodation_node(state, make_ctx("accommodation")))
        result = update["accommodation"]
        assert result["recommendations"]
        assert result["nights"] == 2
        assert result["rooms"] == 2
        assert result["total_cost"] == pytest.approx(result["selected"]["price_per_night"] * 2 * 2)
        assert result["centroid"] is not None

    def test_centroid_search_uses_nearby_first(self):
        poi = EmptyPoiProvider()
        state = make_state(draft_itinerary=hangzhou_draft())
        update = asyncio.run(accommodation_node(state, make_ctx("accommodation", providers_with_poi(poi))))
        assert poi.calls == ["nearby", "keyword"]
        assert update["accommodation"]["total_cost"] == 0.0

    def test_unlocated_draft_still_recommends(self):
        draft = make_draft([[attraction("Somewhere", "09:00")], []])
        state = make_state(make_request(end_date="2025-06-02"), draft_itinerary=draft)
        update = asyncio.run(accommodation_node(state, make_ctx("accommodation")))
        result = update["accommodation"]
        assert result["centroid"] is None
        assert result["recommendations"]
        assert all(r["distance_km"] is None for r in result["recommendations"])

    def test_downgrade_feedback_never_costs_more(self):
        request = make_request(budget=20000.0, travelers=2)
        first = asyncio.run(
            accommodation_node(make_state(request, draft_itinerary=hangzhou_draft()), make_ctx("accommodation"))
        )["accommodation"]

        state = make_state(
            request,
            draft_itinerary=hangzhou_draft(attempt=1),
            accommodation=first,
            budget_result=over_budget_result("downgrade_hotel"),
            retry_count=1,
        )
        second = asyncio.run(accommodation_node(state, make_ctx("accommodation")))["accommodation"]
        assert second["total_cost"] <= first["total_cost"]
        assert second["attempt"] == 1

    def test_downgrade_after_neutral_stay_stays_at_zero(self):
        request = make_request(budget=20000.0, travelers=2)
        neutral = AccommodationResult(attempt=0).model_dump()
        state = make_state(
            request,
            draft_itinerary=hangzhou_draft(attempt=1),
            accommodation=neutral,
            budget_result=over_budget_result("downgrade_hotel"),
            retry_count=1,
        )
        result = asyncio.run(accommodation_node(state, make_ctx("accommodation")))["accommodation"]
        assert result["total_cost"] == 0.0
        assert result["selected"] is None
        assert result["attempt"] == 1

    def test_provider_failure_degrades_at_boundary(self):
        node = create_step_node(
            "accommodation",
            accommodation_node,
            accommodation_neutral,
            providers=providers_with_poi(FailingPoiProvider()),
        )
        state = make_state(draft_itinerary=hangzhou_draft())
        update = asyncio.run(node(state, {"configurable": {"thread_id": "t"}}))
        assert update["accommodation"]["recommendations"] == []
        assert update["accommodation"]["total_cost"] == 0.0
        errors = update["meta"]["errors"]
        assert len(errors) == 1
        assert errors[0]["agent"] == "accommodation"
        assert "ProviderError" in errors[0]["error"]
        assert update["meta"]["agent_executions"][0]["status"] == "failed"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
