import pytest

from trip_planner.errors import ForbiddenError, NotFoundError, ValidationError
from trip_planner.modules.planning.itinerary_service import (
    ItineraryService,
    fallback_itinerary,
    normalize_params,
)

PARAMS = {
    "from": "Mumbai",
    "destination": "Goa",
    "duration": 3,
    "budget": 30000,
    "interests": ["beach", "food"],
    "startDate": "2026-12-01",
}


@pytest.fixture
def service(store):
    return ItineraryService(store)


def test_normalize_requires_core_fields():
    with pytest.raises(ValidationError) as exc:
        normalize_params({"destination": "Goa", "duration": 3})
    assert exc.value.message == "Missing required itinerary parameters"
    assert exc.value.details["missing"] == ["budget", "interests"]


def test_normalize_fills_defaults():
    params = normalize_params(PARAMS)
    assert params["travelStyle"] == "balanced"
    assert params["groupSize"] == 2
    assert params["specialRequirements"] == []
    assert params["endDate"].startswith("2026-12-04")


@pytest.mark.parametrize("group_size, expected", [(4, 4), ("3", 3), ("four", 2), (None, 2), (0, 2), (-1, 2), ([], 2)])
def test_normalize_group_size(group_size, expected):
    assert normalize_params({**PARAMS, "groupSize": group_size})["groupSize"] == expected


def test_normalize_splits_comma_interests():
    params = normalize_params({**PARAMS, "interests": "beach, food ,"})
    assert params["interests"] == ["beach", "food"]


def test_fallback_itinerary_shape():
    plan = fallback_itinerary(normalize_params(PARAMS))
    assert len(plan["days"]) == 3
    assert [d["date"] for d in plan["days"]] == ["2026-12-01", "2026-12-02", "2026-12-03"]
    assert plan["days"][0]["transportation"]["mode"] == "car"
    assert plan["days"][1]["transportation"]["mode"] == "metro"
    assert plan["bookingInfo"]["transportation"][0]["from"] == "Mumbai"
    assert plan["bookingInfo"]["accommodations"][0]["nights"] == 3
    # one bookable activity per day
    assert len(plan["bookingInfo"]["activities"]) == 3


def test_fallback_without_origin_books_no_transport():
    params = normalize_params({k: v for k, v in PARAMS.items() if k != "from"})
    assert fallback_itinerary(params)["bookingInfo"]["transportation"] == []


def test_generate_itinerary_persists_document(service, store):
    doc = service.generate_itinerary({**PARAMS, "userId": "user-1"})
    assert doc["status"] == "generated"
    assert doc["userId"] == "user-1"
    assert store.get("itineraries", doc["id"])["itinerary"]["destination"] == "Goa"


def test_generate_itinerary_defaults_to_demo_user(service):
    assert service.generate_itinerary(PARAMS)["userId"] == "demo-user"


def test_recommendations_by_time_of_day(service):
    result = service.get_personalized_recommendations({"destination": "Goa", "timeOfDay": "evening"})
    assert [r["name"] for r in result["recommendations"]] == ["Night market", "Sunset point"]


def test_analyze_preferences_counts_interests(service):
    history = [
        {"params": {"destination": "Goa", "budget": 10000, "interests": ["beach", "food"]}},
        {"params": {"destination": "Jaipur", "budget": 25000, "interests": ["history", "food"]}},
    ]
    result = service.analyze_user_preferences({"tripHistory": history})
    assert result["topInterests"][0] == "food"
    assert result["budgetRange"] == {"min": 10000.0, "max": 25000.0}
    assert result["tripsAnalyzed"] == 2


def test_adjust_itinerary_checks_ownership(service):
    doc = service.generate_itinerary({**PARAMS, "userId": "owner"})
    with pytest.raises(ForbiddenError):
        service.adjust_itinerary({"itineraryId": doc["id"], "userId": "someone-else"})
    with pytest.raises(NotFoundError):
        service.adjust_itinerary({"itineraryId": "missing", "userId": "owner"})
    with pytest.raises(ValidationError):
        service.adjust_itinerary({"userId": "owner"})


def test_adjust_itinerary_records_history(service):
    doc = service.generate_itinerary({**PARAMS, "userId": "owner"})
    service.adjust_itinerary({"itineraryId": doc["id"], "userId": "owner", "reason": "Rain"})
    updated = service.adjust_itinerary({"itineraryId": doc["id"], "userId": "owner", "reason": "Tired"})
    assert [a["reason"] for a in updated["adjustments"]] == ["Rain", "Tired"]
    assert updated["itinerary"]["adjustmentNote"] == "Tired"
    assert "updatedAt" in updated


def test_weather_adjustments_move_outdoor_plans_indoors(service):
    itinerary = {"days": [{"day": 1, "activities": [
        {"activity": "Beach day at Baga"},
        {"activity": "Museum of Goa"},
    ]}]}
    weather = {"forecast": [{"weather": [{"id": 501}]}, {"weather": [{"id": 800}]}]}
    result = service.generate_weather_adjustments(itinerary, weather)
    assert result["conditions"] == ["rainy"]
    assert len(result["adjustments"]) == 1
    assert result["adjustments"][0]["originalActivity"] == "Beach day at Baga"


def test_weather_adjustments_clear_skies(service):
    result = service.generate_weather_adjustments({"days": []}, [{"condition": "clear"}])
    assert result["adjustments"] == []
    assert result["summary"] == "No weather-related changes needed"


BEACH_DAY = {"days": [{"day": 1, "activities": [{"activity": "Beach day at Baga"}]}]}


@pytest.mark.parametrize("weather, conditions", [
    ("rainy", ["rainy"]),
    (["Rain", "storm"], ["rain", "storm"]),
    ([{"condition": "Rain"}, {"condition": "storm"}], ["rain", "storm"]),
    ({"current": {"condition": "Light Snow"}}, ["light snow"]),
    ([42, None, ["x"], "Drizzle"], ["drizzle"]),
    ({"forecast": {"weather": [{"id": 211}]}}, ["thunderstorm"]),
])
def test_weather_adjustments_match_condition_keywords(service, weather, conditions):
    result = service.generate_weather_adjustments(BEACH_DAY, weather)
    assert result["conditions"] == conditions
    assert [a["originalActivity"] for a in result["adjustments"]] == ["Beach day at Baga"]


def test_weather_adjustments_ignore_unusable_entries(service):
    result = service.generate_weather_adjustments(BEACH_DAY, ["Sunny", 7, {"weather": "cloudy"}])
    assert result["adjustments"] == []
    assert result["conditions"] == []


def test_weather_adjustments_skip_malformed_days(service):
    itinerary = {"days": ["day one", {"day": 2, "activities": ["walk", {"activity": "Lake boat ride"}]}]}
    result = service.generate_weather_adjustments(itinerary, "Heavy rain")
    assert [(a["day"], a["originalActivity"]) for a in result["adjustments"]] == [(2, "Lake boat ride")]


def test_social_templates_filtered_by_platform(service):
    templates = service.generate_social_templates({"destination": "Goa", "days": [{}, {}]}, "Instagram")
    assert list(templates) == ["instagram"]
    assert "#goa" in templates["instagram"]["hashtags"]


def test_social_templates_all_platforms(service):
    templates = service.generate_social_templates({"destination": "Goa"})
    assert set(templates) == {"instagram", "twitter", "facebook", "whatsapp"}
