"""
modules/sustainability/scoring.py
----------------------------------
Fixed-coefficient carbon footprint and local-impact scoring.

Input is an itinerary document as stored in `itineraries`:

    {
      "id": ...,
      "itinerary":   {"days": [{"transportation": {"mode", "distance", "passengers"},
                                "activities":     [{"activity", "description"}],
                                "meals":          [{"cuisine", "restaurant"}]}]},
      "bookingInfo": {"accommodations": [{"type"}]}
    }

Every field is optional; missing sections contribute nothing.

Carbon (kg CO2):
    transport      = distance_km × CARBON_FACTORS[mode] × passengers
    accommodation  = (10 − eco rating) × 0.5       (unknown type → 2)
    activity       = category carbon offset
    food           = 0.5 per local meal, 1.0 otherwise  (reported, not totalled)

Local impact:
    each keyword hit adds its factor multiplier to the score and 1 to the max;
    score = round(impact / max × 100)
"""

from __future__ import annotations

import math
import re
from typing import Any

# ── Lookup tables ──────────────────────────────────────────────────────────────

# kg CO2 per km per person
CARBON_FACTORS: dict[str, float] = {
    "flight":  0.285,
    "train":   0.041,
    "bus":     0.089,
    "car":     0.192,
    "metro":   0.041,
    "walking": 0.0,
    "cycling": 0.0,
    "auto":    0.089,
    "taxi":    0.192,
}

ECO_ACCOMMODATIONS: dict[str, dict[str, Any]] = {
    "eco_lodge":          {"rating": 9, "features": ["Solar power", "Water conservation", "Local materials"]},
    "green_hotel":        {"rating": 7, "features": ["Energy efficient", "Waste reduction", "Local sourcing"]},
    "sustainable_hostel": {"rating": 6, "features": ["Shared facilities", "Local community support"]},
    "regular_hotel":      {"rating": 3, "features": ["Standard amenities"]},
    "luxury_hotel":       {"rating": 2, "features": ["High resource usage"]},
}

SUSTAINABLE_ACTIVITIES: dict[str, dict[str, Any]] = {
    "nature_walk":         {"impact": "positive", "carbonOffset": 0.1},
    "local_cooking_class": {"impact": "positive", "carbonOffset": 0.05},
    "cultural_museum":     {"impact": "neutral",  "carbonOffset": 0.0},
    "eco_tour":            {"impact": "positive", "carbonOffset": 0.2},
    "volunteer_work":      {"impact": "positive", "carbonOffset": 0.3},
    "shopping_mall":       {"impact": "negative", "carbonOffset": -0.1},
    "theme_park":          {"impact": "negative", "carbonOffset": -0.2},
}

LOCAL_IMPACT_FACTORS: dict[str, dict[str, Any]] = {
    "local_businesses": {"multiplier": 1.5, "description": "Supporting local economy"},
    "street_food":      {"multiplier": 1.2, "description": "Local food culture"},
    "public_transport": {"multiplier": 1.3, "description": "Reducing traffic congestion"},
    "cultural_sites":   {"multiplier": 1.1, "description": "Preserving heritage"},
    "eco_activities":   {"multiplier": 1.4, "description": "Environmental awareness"},
}

# Checked in order; first hit wins
_ACTIVITY_CATEGORIES: list[tuple[tuple[str, ...], str]] = [
    (("walk", "hike"),      "nature_walk"),
    (("cook", "food"),      "local_cooking_class"),
    (("museum", "gallery"), "cultural_museum"),
    (("eco", "nature"),     "eco_tour"),
    (("volunteer", "help"), "volunteer_work"),
    (("shop", "mall"),      "shopping_mall"),
    (("theme", "park"),     "theme_park"),
]

_LOCAL_BUSINESS_KEYWORDS = ("local", "traditional", "artisan", "handmade", "family-owned", "small business")
_LOCAL_FOOD_KEYWORDS = ("local", "traditional", "street food", "home-cooked", "regional")
_CULTURAL_KEYWORDS = ("temple", "museum", "heritage", "monument", "cultural", "historical", "art gallery")
_PUBLIC_TRANSPORT_MODES = ("metro", "bus")

DEFAULT_DISTANCE_KM = 10.0
# Reference "high impact" trip used for carbon-saved
HIGH_IMPACT_CARBON_KG = 300.0

_DISTANCE_RE = re.compile(r"(\d+\.?\d*)")


# ── Accessors ──────────────────────────────────────────────────────────────────

def _days(doc: dict) -> list[dict]:
    days = ((doc or {}).get("itinerary") or {}).get("days")
    return [d for d in days if isinstance(d, dict)] if isinstance(days, list) else []


def booking_info(doc: dict) -> dict:
    """Top-level `bookingInfo` only; a copy nested in `itinerary` is ignored."""
    return (doc or {}).get("bookingInfo") or {}


def _accommodations(doc: dict) -> list[dict]:
    return booking_info(doc).get("accommodations") or []


def _text(*parts: Any) -> str:
    return " ".join(str(p) for p in parts if p).lower()


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Half-up rounding (2.5 -> 3), unlike the built-in banker's round()."""
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


# ── Carbon ─────────────────────────────────────────────────────────────────────

def extract_distance(distance: Any) -> float:
    """First number in e.g. "12.5 km"; 0 when there is none."""
    if distance is None or distance == "":
        return 0.0
    match = _DISTANCE_RE.search(str(distance))
    return float(match.group(1)) if match else 0.0


def as_number(value: Any, default: float) -> float:
    """Numbers and numeric strings ("2", " 3.5 "); anything else, or zero, gives `default`."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if number and math.isfinite(number) else default


def transport_carbon(transportation: dict) -> float:
    mode = str(transportation.get("mode") or "car").lower()
    distance = extract_distance(transportation.get("distance")) or DEFAULT_DISTANCE_KM
    passengers = as_number(transportation.get("passengers"), 1)
    factor = CARBON_FACTORS.get(mode, CARBON_FACTORS["car"])
    return distance * factor * passengers


def categorize_activity(name: Any) -> str:
    activity = str(name or "").lower()
    for keywords, category in _ACTIVITY_CATEGORIES:
        if any(k in activity for k in keywords):
            return category
    return "cultural_museum"


def activity_carbon(activity: dict) -> float:
    category = categorize_activity(activity.get("activity"))
    return SUSTAINABLE_ACTIVITIES.get(category, {}).get("carbonOffset", 0.0)


def accommodation_carbon(accommodation: dict) -> float:
    acc_type = str(accommodation.get("type") or "regular_hotel").lower()
    eco = ECO_ACCOMMODATIONS.get(acc_type)
    if eco:
        # Lower rating = higher footprint
        return (10 - eco["rating"]) * 0.5
    return 2.0


def food_carbon(doc: dict) -> float:
    total = 0.0
    for day in _days(doc):
        for meal in day.get("meals") or []:
            total += 0.5 if "local" in str(meal.get("cuisine") or "").lower() else 1.0
    return total


def carbon_rating(total: float) -> dict:
    if total < 50:
        return {"level": "excellent", "color": "green", "message": "Very eco-friendly trip!"}
    if total < 100:
        return {"level": "good", "color": "blue", "message": "Good environmental impact"}
    if total < 200:
        return {"level": "moderate", "color": "yellow", "message": "Moderate environmental impact"}
    if total < 300:
        return {"level": "high", "color": "orange", "message": "High environmental impact"}
    return {"level": "very_high", "color": "red", "message": "Very high environmental impact"}


def carbon_breakdown(doc: dict) -> tuple[float, dict[str, float]]:
    """
    Return (total, breakdown). Food is reported in the breakdown only.
    """
    breakdown = {"transportation": 0.0, "accommodation": 0.0, "activities": 0.0, "food": 0.0}
    total = 0.0

    for day in _days(doc):
        if day.get("transportation"):
            c = transport_carbon(day["transportation"])
            breakdown["transportation"] += c
            total += c
        for activity in day.get("activities") or []:
            c = activity_carbon(activity)
            breakdown["activities"] += c
            total += c

    for accommodation in _accommodations(doc):
        c = accommodation_carbon(accommodation)
        breakdown["accommodation"] += c
        total += c

    breakdown["food"] = food_carbon(doc)
    return total, breakdown


def total_carbon(doc: dict) -> float:
    return round_half_up(carbon_breakdown(doc)[0], 2)


# ── Local impact ───────────────────────────────────────────────────────────────

def is_local_business(activity: dict) -> bool:
    text = _text(activity.get("activity"), activity.get("description"))
    return any(k in text for k in _LOCAL_BUSINESS_KEYWORDS)


def is_local_food(meal: dict) -> bool:
    text = _text(meal.get("cuisine"), meal.get("restaurant"))
    return any(k in text for k in _LOCAL_FOOD_KEYWORDS)


def is_cultural_site(activity: dict) -> bool:
    text = _text(activity.get("activity"), activity.get("description"))
    return any(k in text for k in _CULTURAL_KEYWORDS)


def impact_rating(score: float) -> dict:
    if score >= 80:
        return {"level": "excellent", "color": "green", "message": "Excellent local impact!"}
    if score >= 60:
        return {"level": "good", "color": "blue", "message": "Good local community support"}
    if score >= 40:
        return {"level": "moderate", "color": "yellow", "message": "Moderate local impact"}
    if score >= 20:
        return {"level": "low", "color": "orange", "message": "Low local impact"}
    return {"level": "very_low", "color": "red", "message": "Very low local impact"}


def local_impact_recommendations(score: float) -> list[str]:
    """Tiers are cumulative: a low score gets every tier below it too."""
    recommendations: list[str] = []
    if score < 40:
        recommendations += [
            "Try more local restaurants and street food",
            "Visit local markets and artisan shops",
            "Use public transportation instead of private vehicles",
            "Participate in cultural activities and festivals",
        ]
    if score < 60:
        recommendations += [
            "Stay in locally-owned accommodations",
            "Book tours with local guides",
            "Buy souvenirs from local artisans",
        ]
    if score < 80:
        recommendations += [
            "Volunteer with local community projects",
            "Learn about local customs and traditions",
            "Support local environmental initiatives",
        ]
    return recommendations


def calculate_local_impact(doc: dict) -> dict:
    impact = 0.0
    max_score = 0
    factors: list[str] = []

    def _hit(key: str) -> None:
        nonlocal impact, max_score
        factor = LOCAL_IMPACT_FACTORS[key]
        impact += factor["multiplier"]
        max_score += 1
        factors.append(factor["description"])

    for day in _days(doc):
        activities = day.get("activities") or []
        for activity in activities:
            if is_local_business(activity):
                _hit("local_businesses")
        for meal in day.get("meals") or []:
            if is_local_food(meal):
                _hit("street_food")
        if (day.get("transportation") or {}).get("mode") in _PUBLIC_TRANSPORT_MODES:
            _hit("public_transport")
        for activity in activities:
            if is_cultural_site(activity):
                _hit("cultural_sites")

    score = (impact / max_score) * 100 if max_score > 0 else 0.0
    return {
        "score": int(round_half_up(score)),
        "rating": impact_rating(score),
        "factors": list(dict.fromkeys(factors)),
        "recommendations": local_impact_recommendations(score),
    }


# ── Progress ───────────────────────────────────────────────────────────────────

def count_local_businesses(doc: dict) -> int:
    return sum(
        1
        for day in _days(doc)
        for activity in day.get("activities") or []
        if is_local_business(activity)
    )


def count_eco_activities(doc: dict) -> int:
    return sum(
        1
        for day in _days(doc)
        for activity in day.get("activities") or []
        if SUSTAINABLE_ACTIVITIES[categorize_activity(activity.get("activity"))]["impact"] == "positive"
    )


def carbon_saved(doc: dict) -> float:
    return max(0.0, HIGH_IMPACT_CARBON_KG - total_carbon(doc))


def overall_score(doc: dict) -> int:
    """60% carbon, 40% local impact."""
    carbon_score = max(0.0, 100 - total_carbon(doc) / 3)
    impact_score = calculate_local_impact(doc)["score"]
    return int(round_half_up(carbon_score * 0.6 + impact_score * 0.4))


def achievements(doc: dict) -> list[str]:
    earned: list[str] = []
    score = overall_score(doc)
    if score >= 90:
        earned.append("Sustainability Champion")
    if score >= 80:
        earned.append("Eco Warrior")
    if score >= 70:
        earned.append("Green Traveler")
    if count_eco_activities(doc) >= 5:
        earned.append("Eco Explorer")
    if count_local_businesses(doc) >= 10:
        earned.append("Local Supporter")
    return earned


def next_goals(doc: dict) -> list[str]:
    goals: list[str] = []
    if overall_score(doc) < 70:
        goals.append("Increase eco-friendly activities")
    if count_local_businesses(doc) < 5:
        goals.append("Support more local businesses")
    if total_carbon(doc) > 100:
        goals.append("Reduce carbon footprint")
    return goals
