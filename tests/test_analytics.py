import pytest

from trip_planner.modules.analytics import insights
from trip_planner.modules.analytics.insights import analytics_service


def _trip(budget, duration=3, rating=None, group=2, created="2026-01-15T00:00:00+00:00", destination="Goa"):
    trip = {
        "userId": "user-1",
        "params": {"destination": destination, "budget": budget, "duration": duration, "groupSize": group},
        "createdAt": created,
    }
    if rating is not None:
        trip["feedback"] = {"rating": rating}
    return trip


def test_calculate_trends_newer_half_against_older_half():
    # newest first, as returned by get_user_trip_history
    trips = [_trip(30000, rating=5), _trip(20000, rating=4), _trip(10000, rating=4), _trip(10000, rating=2)]
    trends = insights.calculate_trends(trips)
    assert trends["budgetTrend"] == pytest.approx(150.0)
    assert trends["durationTrend"] == 0.0
    assert trends["satisfactionTrend"] == pytest.approx(50.0)


def test_calculate_trends_single_trip():
    assert insights.calculate_trends([_trip(1000)])["budgetTrend"] == 0.0


@pytest.mark.parametrize("month, season", [(0, "Winter"), (2, "Spring"), (6, "Summer"), (9, "Autumn"), (11, "Winter"), (None, "Winter")])
def test_season_for(month, season):
    assert insights.season_for(month) == season


def test_group_preference_tie_goes_to_larger_group():
    data = [{"groupSize": 2}, {"groupSize": 4}, {"groupSize": 2}, {"groupSize": 4}, {"groupSize": 1}]
    assert insights.group_preference(data) == 4
    assert insights.group_preference([]) is None


def test_social_score():
    assert insights.social_score([{"groupSize": 1}, {"groupSize": 1}, {"groupSize": 3}]) == "solo"
    assert insights.social_score([{"groupSize": 1}, {"groupSize": 3}, {"groupSize": 2}]) == "social"


def test_analysis_confidence_bands():
    assert insights.analysis_confidence([1, 2]) == 0.3
    assert insights.analysis_confidence(list(range(5))) == 0.6
    assert insights.analysis_confidence(list(range(10))) == 0.9


def test_budget_efficiency_and_exploration():
    budget = [{"totalBudget": 1000, "actualCost": 800}, {"totalBudget": 1000, "actualCost": 1000}]
    assert insights.budget_efficiency(budget) == pytest.approx(10.0)
    destinations = [{"destination": "Goa"}, {"destination": "Goa"}, {"destination": "Delhi"}, {"destination": "Pune"}]
    assert insights.exploration_score(destinations) == 75.0


def test_travel_patterns_without_history():
    result = analytics_service.analyze_travel_patterns("nobody")
    assert result["message"].startswith("Insufficient data")


def test_track_recommendation_and_stats(store):
    for action in ("viewed", "viewed", "clicked", "booked"):
        result = analytics_service.track_recommendation_effectiveness("user-1", "rec-1", action)
        assert result["success"] is True
        assert len(result["trackingData"]["sessionId"]) == 26

    stats = analytics_service.get_recommendation_stats("user-1")
    assert stats == {"total": 4, "viewed": 2, "clicked": 1, "booked": 1, "ignored": 0}
    assert analytics_service.get_recommendation_stats("user-2")["total"] == 0


def test_sustainability_metrics_average_over_trips(store, trip_doc):
    store.add("itineraries", trip_doc)
    store.add("itineraries", {**trip_doc, "createdAt": "2026-11-02T10:00:00+00:00"})
    metrics = analytics_service.get_sustainability_metrics("user-1")
    assert metrics["totalTrips"] == 2
    assert metrics["averageCarbon"] == pytest.approx(metrics["totalCarbon"] / 2)


def test_dashboard_with_stub_llm(store, trip_doc):
    store.add("itineraries", trip_doc)
    dashboard = analytics_service.get_analytics_dashboard("user-1")
    assert set(dashboard) == {"userInsights", "recentTrips", "recommendationStats", "sustainabilityMetrics", "generatedAt"}
    assert dashboard["userInsights"]["userProfile"] == "Balanced traveler"
    assert len(dashboard["recentTrips"]) == 1
