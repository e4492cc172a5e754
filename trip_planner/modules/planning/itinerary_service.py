"""
modules/planning/itinerary_service.py
--------------------------------------
LLM-backed itinerary generation and the helpers around it.

Every public method follows the same shape:
    prompt  →  call_llm  →  extract JSON  →  canned fallback on any failure

Generated itineraries are persisted to the `itineraries` collection as
    {id, userId, params, itinerary, status: "generated", createdAt}
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone

from trip_planner.db import get_store, new_id, now_iso
from trip_planner.errors import ForbiddenError, NotFoundError, ValidationError
from trip_planner.llm import generate_json
from trip_planner.modules.tool_usage.weather_tool import condition_of, is_adverse

logger = logging.getLogger(__name__)

REQUIRED_PARAMS = ("destination", "duration", "budget", "interests")

POPULAR_DESTINATIONS: list[dict] = [
    {"name": "Paris, France", "image": "/images/paris.jpg", "popularity": 95},
    {"name": "Tokyo, Japan", "image": "/images/tokyo.jpg", "popularity": 92},
    {"name": "New York, USA", "image": "/images/nyc.jpg", "popularity": 90},
    {"name": "London, UK", "image": "/images/london.jpg", "popularity": 88},
    {"name": "Rome, Italy", "image": "/images/rome.jpg", "popularity": 85},
    {"name": "Barcelona, Spain", "image": "/images/barcelona.jpg", "popularity": 82},
    {"name": "Amsterdam, Netherlands", "image": "/images/amsterdam.jpg", "popularity": 80},
    {"name": "Sydney, Australia", "image": "/images/sydney.jpg", "popularity": 78},
]

# Activity text that marks a plan as weather-exposed
OUTDOOR_KEYWORDS = (
    "beach", "park", "hike", "trek", "walk", "garden", "outdoor", "boat",
    "cruise", "safari", "market", "fort", "lake", "viewpoint", "cycling",
)

INDOOR_ALTERNATIVES = (
    "Visit a local museum",
    "Explore an indoor market or mall",
    "Take a local cooking class",
    "Spa or wellness session",
    "Visit an art gallery",
)

# Per-day template for the canned itinerary: (time, activity, category, duration, bookingRequired)
_DAY_TEMPLATE = (
    ("09:00", "Morning sightseeing tour of {destination}", "sightseeing", "3 hours", True),
    ("14:00", "Explore local markets of {destination}", "shopping", "2 hours", False),
    ("17:00", "Visit a cultural heritage site in {destination}", "cultural", "2 hours", False),
)

_RECOMMENDATIONS_BY_TIME = {
    "morning": [
        {"name": "Sunrise viewpoint", "type": "sightseeing", "description": "Start the day with a scenic view", "estimatedCost": 0},
        {"name": "Local breakfast cafe", "type": "food", "description": "Try a traditional breakfast", "estimatedCost": 300},
    ],
    "afternoon": [
        {"name": "City museum", "type": "cultural", "description": "Learn the local history", "estimatedCost": 500},
        {"name": "Heritage walk", "type": "sightseeing", "description": "Guided walk through the old town", "estimatedCost": 400},
    ],
    "evening": [
        {"name": "Night market", "type": "shopping", "description": "Street food and local crafts", "estimatedCost": 600},
        {"name": "Sunset point", "type": "sightseeing", "description": "Watch the sunset over the city", "estimatedCost": 0},
    ],
}


def _parse_date(value) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value}") from exc


def _group_size(value) -> int:
    """Whole travellers; non-numeric or non-positive values give the default 2."""
    try:
        size = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 2
    return size if size >= 1 else 2


def normalize_params(params: dict) -> dict:
    """Validate required fields and fill in the documented defaults."""
    missing = [k for k in REQUIRED_PARAMS if not params.get(k)]
    if missing:
        raise ValidationError("Missing required itinerary parameters", details={"missing": missing})

    try:
        duration = int(params["duration"])
        budget = float(params["budget"])
    except (TypeError, ValueError) as exc:
        raise ValidationError("duration and budget must be numeric") from exc
    if duration < 1:
        raise ValidationError("duration must be at least 1 day")

    start = _parse_date(params.get("startDate"))
    end = _parse_date(params["endDate"]) if params.get("endDate") else start + timedelta(days=duration)

    interests = params["interests"]
    if isinstance(interests, str):
        interests = [i.strip() for i in interests.split(",") if i.strip()]

    return {
        **params,
        "duration": duration,
        "budget": budget,
        "interests": list(interests),
        "travelStyle": params.get("travelStyle") or "balanced",
        "groupSize": _group_size(params.get("groupSize")),
        "specialRequirements": params.get("specialRequirements") or [],
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
    }


def fallback_itinerary(params: dict) -> dict:
    """Deterministic `duration`-day plan used when the LLM is unavailable."""
    destination = params["destination"]
    duration = params["duration"]
    start = _parse_date(params.get("startDate"))
    group = params.get("groupSize", 2)
    per_day = round(params["budget"] / duration) if duration else 0

    days = []
    booking_activities = []
    for i in range(duration):
        activities = []
        for time, activity, category, length, booking_required in _DAY_TEMPLATE:
            entry = {
                "time": time,
                "activity": activity.format(destination=destination),
                "description": f"Day {i + 1}: {category} in {destination}",
                "location": destination,
                "cost": f"₹{round(per_day * 0.15)}",
                "duration": length,
                "category": category,
                "bookingRequired": booking_required,
            }
            activities.append(entry)
            if booking_required:
                booking_activities.append({"name": entry["activity"], "date": (start + timedelta(days=i)).date().isoformat(), "cost": entry["cost"]})

        days.append({
            "day": i + 1,
            "date": (start + timedelta(days=i)).date().isoformat(),
            "title": f"Day {i + 1} in {destination}",
            "activities": activities,
            "meals": [
                {"type": "breakfast", "restaurant": "Hotel restaurant", "cuisine": "Continental", "cost": f"₹{round(per_day * 0.05)}"},
                {"type": "lunch", "restaurant": "Local eatery", "cuisine": "Local cuisine", "cost": f"₹{round(per_day * 0.1)}"},
                {"type": "dinner", "restaurant": "Popular local restaurant", "cuisine": "Local cuisine", "cost": f"₹{round(per_day * 0.15)}"},
            ],
            "transportation": {"mode": "metro" if i else "car", "distance": "15 km", "cost": f"₹{round(per_day * 0.05)}"},
            "accommodation": {"name": f"Hotel in {destination}", "type": "regular_hotel", "cost": f"₹{round(per_day * 0.3)}"},
        })

    return {
        "destination": destination,
        "duration": duration,
        "days": days,
        "estimatedCost": {"total": params["budget"], "perPerson": round(params["budget"] / max(group, 1))},
        "tips": [
            f"Carry a reusable water bottle while exploring {destination}",
            "Use public transport to save money and reduce emissions",
            "Book popular attractions in advance",
        ],
        "bookingInfo": {
            "transportation": (
                [{"type": "flight", "from": params["from"], "to": destination, "date": start.date().isoformat(), "passengers": group}]
                if params.get("from") else []
            ),
            "accommodations": [{
                "name": f"Hotel in {destination}",
                "type": "regular_hotel",
                "checkIn": start.date().isoformat(),
                "checkOut": (start + timedelta(days=duration)).date().isoformat(),
                "nights": duration,
                "guests": group,
                "cost": f"₹{round(per_day * 0.3 * duration)}",
            }],
            "activities": booking_activities,
        },
    }


class ItineraryService:

    def __init__(self, store=None) -> None:
        self._store = store

    @property
    def store(self):
        return self._store or get_store()

    # ── generation ───────────────────────────────────────────────────────

    def generate_itinerary(self, params: dict) -> dict:
        params = normalize_params(params)
        prompt = f"""
Create a detailed day-by-day travel itinerary as JSON.

From: {params.get("from") or "not specified"}
Destination: {params["destination"]}
Duration: {params["duration"]} days ({params["startDate"][:10]} to {params["endDate"][:10]})
Budget: ₹{params["budget"]}
Interests: {", ".join(params["interests"])}
Travel style: {params["travelStyle"]}
Group size: {params["groupSize"]}
Special requirements: {", ".join(params["specialRequirements"]) or "none"}

Return JSON with:
- days: array of {{day, date, title,
    activities: [{{time, activity, description, location, cost, duration, category, bookingRequired}}],
    meals: [{{type, restaurant, cuisine, cost}}],
    transportation: {{mode, distance, cost}},
    accommodation}}
- estimatedCost
- tips: array of strings
- bookingInfo: {{transportation: [], accommodations: [], activities: []}}
"""
        itinerary = generate_json(prompt, lambda: fallback_itinerary(params), label="generate_itinerary")
        if not isinstance(itinerary, dict) or not isinstance(itinerary.get("days"), list):
            logger.warning("LLM itinerary missing days[], using canned itinerary")
            itinerary = fallback_itinerary(params)

        doc = {
            "id": new_id(),
            "userId": params.get("userId") or "demo-user",
            "params": params,
            "itinerary": itinerary,
            "status": "generated",
            "createdAt": now_iso(),
        }
        self.store.set("itineraries", doc["id"], doc)
        logger.info("Generated %d-day itinerary %s for %s", len(itinerary["days"]), doc["id"], params["destination"])
        return doc

    def get_personalized_recommendations(self, params: dict) -> dict:
        time_of_day = params.get("timeOfDay") or "any"
        prompt = f"""
Suggest personalised travel recommendations.

Destination: {params.get("destination")}
Current location: {params.get("currentLocation")}
Interests: {", ".join(params.get("interests") or [])}
Budget: {params.get("budget") or 0}
Time of day: {time_of_day}
Weather: {params.get("weather") or "clear"}

Return JSON: {{"recommendations": [{{name, type, description, estimatedCost}}]}}
"""

        def fallback() -> dict:
            if time_of_day in _RECOMMENDATIONS_BY_TIME:
                recs = list(_RECOMMENDATIONS_BY_TIME[time_of_day])
            else:
                recs = [r for group in _RECOMMENDATIONS_BY_TIME.values() for r in group]
            return {"recommendations": recs, "timeOfDay": time_of_day}

        result = generate_json(prompt, fallback, label="recommendations")
        if not isinstance(result, dict) or "recommendations" not in result:
            return fallback()
        return result

    def analyze_user_preferences(self, params: dict) -> dict:
        history = params.get("tripHistory") or []
        prompt = f"""
Analyse this traveller's preferences.

Trip history: {json.dumps(history[:10], default=str)}
Feedback: {json.dumps(params.get("feedback") or [], default=str)}
Stated preferences: {json.dumps(params.get("preferences") or {}, default=str)}

Return JSON with: preferredDestinations, travelStyle, budgetRange, topInterests, insights.
"""

        def fallback() -> dict:
            interests = Counter(
                i for trip in history
                for i in ((trip.get("params") or trip).get("interests") or [])
            )
            budgets = [
                float((trip.get("params") or trip).get("budget") or 0)
                for trip in history
            ]
            return {
                "topInterests": [name for name, _ in interests.most_common(5)],
                "preferredDestinations": [
                    (t.get("params") or t).get("destination") for t in history
                    if (t.get("params") or t).get("destination")
                ][:5],
                "travelStyle": (params.get("preferences") or {}).get("travelStyle", "balanced"),
                "budgetRange": {"min": min(budgets), "max": max(budgets)} if budgets else None,
                "tripsAnalyzed": len(history),
                "insights": ["Plan more trips to get sharper recommendations"] if len(history) < 3 else [],
            }

        result = generate_json(prompt, fallback, label="analyze_preferences")
        return result if isinstance(result, dict) else fallback()

    # ── adjustments ──────────────────────────────────────────────────────

    def adjust_itinerary(self, params: dict) -> dict:
        itinerary_id = params.get("itineraryId")
        if not itinerary_id:
            raise ValidationError("itineraryId is required")

        doc = self.store.get("itineraries", itinerary_id)
        if doc is None:
            raise NotFoundError("Itinerary not found")
        if doc.get("userId") != params.get("userId"):
            raise ForbiddenError("Unauthorized access")

        current = doc.get("itinerary") or {}
        prompt = f"""
Adjust this travel itinerary.

Current itinerary: {json.dumps(current, default=str)}
Requested adjustments: {json.dumps(params.get("adjustments"), default=str)}
Reason: {params.get("reason")}
Current location: {params.get("currentLocation")}
Weather: {params.get("weather")}
Time constraints: {params.get("timeConstraints")}

Return the full adjusted itinerary as JSON with the same structure (days[] ...).
"""
        adjusted = generate_json(prompt, None, label="adjust_itinerary")
        if not isinstance(adjusted, dict) or not isinstance(adjusted.get("days"), list):
            adjusted = {**current, "adjustmentNote": params.get("reason") or "Adjustment requested"}

        history = list(doc.get("adjustments") or [])
        history.append({
            "adjustments": params.get("adjustments"),
            "reason": params.get("reason"),
            "timestamp": now_iso(),
        })
        return self.store.update("itineraries", itinerary_id, {
            "itinerary": adjusted,
            "adjustments": history,
            "updatedAt": now_iso(),
        })

    def generate_weather_adjustments(self, itinerary: dict, weather_data: dict | list | str | None) -> dict:
        prompt = f"""
Given this itinerary and weather forecast, suggest adjustments.

Itinerary: {json.dumps(itinerary, default=str)[:4000]}
Weather: {json.dumps(weather_data, default=str)[:2000]}

Return JSON: {{"adjustments": [{{day, originalActivity, suggestedActivity, reason}}], "summary"}}
"""
        result = generate_json(prompt, lambda: self._rule_based_weather_adjustments(itinerary, weather_data),
                               label="weather_adjustments")
        return result if isinstance(result, dict) else self._rule_based_weather_adjustments(itinerary, weather_data)

    @staticmethod
    def _rule_based_weather_adjustments(itinerary: dict, weather_data) -> dict:
        if isinstance(weather_data, dict):
            forecast = weather_data.get("forecast") or [weather_data.get("current") or weather_data]
        elif isinstance(weather_data, str):
            forecast = [weather_data]
        else:
            forecast = weather_data or []
        if not isinstance(forecast, list):
            forecast = [forecast]
        adverse = sorted({c for c in map(condition_of, forecast) if is_adverse(c)})

        adjustments = []
        if adverse:
            inner = (itinerary or {}).get("itinerary") or itinerary or {}
            days = inner.get("days") if isinstance(inner, dict) else None
            for day in days if isinstance(days, list) else []:
                if not isinstance(day, dict):
                    continue
                for activity in day.get("activities") or []:
                    if not isinstance(activity, dict):
                        continue
                    text = f"{activity.get('activity', '')} {activity.get('description', '')}".lower()
                    if any(k in text for k in OUTDOOR_KEYWORDS):
                        adjustments.append({
                            "day": day.get("day"),
                            "originalActivity": activity.get("activity"),
                            "suggestedActivity": INDOOR_ALTERNATIVES[len(adjustments) % len(INDOOR_ALTERNATIVES)],
                            "reason": f"Expected {adverse[0].replace('_', ' ')} weather",
                        })

        return {
            "adjustments": adjustments,
            "conditions": adverse,
            "summary": (
                f"{len(adjustments)} outdoor activities may be affected by {', '.join(adverse)}"
                if adverse else "No weather-related changes needed"
            ),
        }

    # ── social ───────────────────────────────────────────────────────────

    def generate_social_templates(self, itinerary: dict, platform: str | None = None) -> dict:
        inner = (itinerary or {}).get("itinerary") or itinerary or {}
        destination = inner.get("destination") or ((itinerary or {}).get("params") or {}).get("destination") or "my trip"
        days = len(inner.get("days") or []) or inner.get("duration") or ""
        tag = "".join(str(destination).split(",")[0].split()).lower()

        prompt = f"""
Write social media post templates for a trip to {destination} ({days} days).
Platform: {platform or "all"}

Return JSON keyed by platform (instagram, twitter, facebook, whatsapp), each {{text, hashtags}}.
"""

        def fallback() -> dict:
            templates = {
                "instagram": {
                    "text": f"Exploring {destination} ✨ {days} days of adventure!",
                    "hashtags": [f"#{tag}", "#travel", "#wanderlust", "#tripplanner"],
                },
                "twitter": {
                    "text": f"Just planned {days} days in {destination}. Can't wait!",
                    "hashtags": [f"#{tag}", "#travel"],
                },
                "facebook": {
                    "text": f"Heading to {destination} for {days} days! Any tips from friends who've been?",
                    "hashtags": [],
                },
                "whatsapp": {
                    "text": f"Hey! I'm going to {destination} for {days} days. Here's my itinerary.",
                    "hashtags": [],
                },
            }
            if platform and platform.lower() in templates:
                return {platform.lower(): templates[platform.lower()]}
            return templates

        result = generate_json(prompt, fallback, label="social_templates")
        return result if isinstance(result, dict) else fallback()


itinerary_service = ItineraryService()
