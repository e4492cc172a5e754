import pytest

from trip_planner.modules.sustainability import scoring
from trip_planner.modules.sustainability.service import sustainability_service

DOC = {
    "id": "trip-1",
    "itinerary": {"days": [{
        "transportation": {"mode": "metro", "distance": "10 km"},
        "activities": [{"activity": "Nature walk in the hills"}],
        "meals": [{"cuisine": "Local thali", "restaurant": "Annapurna"}],
    }]},
    "bookingInfo": {"accommodations": [{"type": "eco_lodge"}]},
}


def test_extract_distance():
    assert scoring.extract_distance("12.5 km") == 12.5
    assert scoring.extract_distance("far") == 0.0
    assert scoring.extract_distance(None) == 0.0


def test_transport_carbon_defaults():
    # no distance -> 10 km, unknown mode -> car factor
    assert scoring.transport_carbon({"mode": "rickshaw"}) == pytest.approx(1.92)
    assert scoring.transport_carbon({"mode": "flight", "distance": "100 km", "passengers": 2}) == pytest.approx(57.0)


def test_categorize_activity_first_match_wins():
    assert scoring.categorize_activity("Food walk") == "nature_walk"
    assert scoring.categorize_activity("Theme park") == "theme_park"
    assert scoring.categorize_activity("Sunset cruise") == "cultural_museum"


def test_accommodation_carbon():
    assert scoring.accommodation_carbon({"type": "eco_lodge"}) == 0.5
    assert scoring.accommodation_carbon({"type": "luxury_hotel"}) == 4.0
    assert scoring.accommodation_carbon({"type": "treehouse"}) == 2.0


def test_carbon_footprint_excludes_food_from_total():
    result = sustainability_service.calculate_carbon_footprint(DOC)
    assert result["totalCarbon"] == pytest.approx(1.01)
    assert result["breakdown"]["food"] == 0.5
    assert result["rating"]["level"] == "excellent"
    assert len(result["recommendations"]) == 3


def test_carbon_footprint_without_tips():
    assert "recommendations" not in sustainability_service.calculate_carbon_footprint(DOC, with_tips=False)


@pytest.mark.parametrize("total, level", [(49.9, "excellent"), (50, "good"), (150, "moderate"), (299, "high"), (300, "very_high")])
def test_carbon_rating_bands(total, level):
    assert scoring.carbon_rating(total)["level"] == level


def test_local_impact_scores_matches():
    result = sustainability_service.calculate_local_impact(DOC)
    # local food 1.2 + metro 1.3 over 2 hits
    assert result["score"] == 125
    assert result["rating"]["level"] == "excellent"
    assert result["factors"] == ["Local food culture", "Reducing traffic congestion"]
    assert result["recommendations"] == []


def test_local_impact_empty_trip():
    result = scoring.calculate_local_impact({})
    assert result["score"] == 0
    assert result["rating"]["level"] == "very_low"
    assert len(result["recommendations"]) == 10


def test_round_half_up():
    assert scoring.round_half_up(2.5) == 3
    assert scoring.round_half_up(1.234, 2) == 1.23


def test_track_progress():
    progress = sustainability_service.track_progress("user-1", DOC)
    assert progress["tripId"] == "trip-1"
    assert progress["carbonSaved"] == pytest.approx(298.99)
    assert progress["ecoActivitiesCompleted"] == 1
    assert progress["localBusinessesSupported"] == 0
    assert progress["sustainabilityScore"] == 110
    assert progress["achievements"] == ["Sustainability Champion", "Eco Warrior", "Green Traveler"]
    assert progress["nextGoals"] == ["Support more local businesses"]


def test_report_and_alternatives_fallbacks():
    report = sustainability_service.generate_sustainability_report(DOC)
    assert report["carbonFootprint"]["totalCarbon"] == pytest.approx(1.01)
    assert report["localImpact"]["score"] == 125
    assert "generatedAt" in report

    alternatives = sustainability_service.get_eco_friendly_alternatives(DOC)
    assert "Eco-lodges" in alternatives["accommodation"]


@pytest.mark.parametrize("passengers, expected", [
    (2, 38.4),
    ("2", 38.4),
    (" 3 ", 57.6),
    ("two", 19.2),
    (None, 19.2),
    (0, 19.2),
    ([2], 19.2),
    (True, 19.2),
])
def test_transport_carbon_coerces_passengers(passengers, expected):
    leg = {"mode": "car", "distance": 100, "passengers": passengers}
    assert scoring.transport_carbon(leg) == pytest.approx(expected)


def test_string_passengers_do_not_trigger_canned_footprint():
    doc = {"itinerary": {"days": [{"transportation": {"mode": "car", "distance": "100", "passengers": "2"}}]}}
    result = sustainability_service.calculate_carbon_footprint(doc, with_tips=False)
    assert result["totalCarbon"] == pytest.approx(38.4)
    assert result["rating"]["level"] == "excellent"


def test_accommodation_only_counted_from_top_level_booking_info():
    nested = {"itinerary": {"days": [], "bookingInfo": {"accommodations": [{"type": "luxury_hotel"}]}}}
    _, breakdown = scoring.carbon_breakdown(nested)
    assert breakdown["accommodation"] == 0.0

    top_level = {**nested, "bookingInfo": {"accommodations": [{"type": "luxury_hotel"}]}}
    assert scoring.carbon_breakdown(top_level)[1]["accommodation"] == 4.0


@pytest.mark.parametrize("days", [None, "day one", ["not a day", {"activities": []}]])
def test_malformed_days_are_skipped(days):
    doc = {"itinerary": {"days": days}}
    assert scoring.total_carbon(doc) == 0.0
    progress = sustainability_service.track_progress("user-1", doc)
    assert progress["carbonSaved"] == 300.0
    report = sustainability_service.generate_sustainability_report(doc)
    assert report["carbonFootprint"]["totalCarbon"] == 0.0
