"""
modules/analytics/insights.py
------------------------------
Per-user travel analytics over the `itineraries` collection.

Five LLM analyses (travel patterns, budget, destinations, seasons, group
dynamics) are each enriched with locally computed metrics, saved to
`user_analytics`, and combined into one insights document. Every analysis
has a canned fallback so the dashboard always renders.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
from collections import Counter
from datetime import datetime
from typing import Any

from trip_planner.db import get_store, now_iso
from trip_planner.llm import generate_json
from trip_planner.modules.sustainability.service import sustainability_service

logger = logging.getLogger(__name__)


ANALYTICS_CATEGORIES: dict[str, str] = {
    "travel_patterns":              "Travel behavior and preferences analysis",
    "budget_optimization":          "Spending patterns and cost optimization",
    "destination_preferences":      "Location and activity preferences",
    "seasonal_trends":              "Time-based travel patterns",
    "group_dynamics":               "Travel group size and composition analysis",
    "sustainability_metrics":       "Environmental impact tracking",
    "satisfaction_analysis":        "User satisfaction and feedback analysis",
    "recommendation_effectiveness": "AI recommendation performance",
}

TRACKED_ACTIONS = ("viewed", "clicked", "booked", "ignored")

REGION_MAP: dict[str, str] = {
    "Mumbai":    "West",
    "Delhi":     "North",
    "Bangalore": "South",
    "Chennai":   "South",
    "Kolkata":   "East",
    "Hyderabad": "South",
    "Pune":      "West",
    "Ahmedabad": "West",
    "Jaipur":    "North",
    "Goa":       "West",
}

_EMPTY_STATS = {"total": 0, "viewed": 0, "clicked": 0, "booked": 0, "ignored": 0}
_EMPTY_SUSTAINABILITY = {"totalCarbon": 0, "averageCarbon": 0, "averageLocalImpact": 0, "totalTrips": 0}


# ── Canned results ─────────────────────────────────────────────────────────────

def empty_analysis_result() -> dict:
    return {
        "message": "Insufficient data for analysis. Complete more trips to get personalized insights.",
        "recommendations": ["Plan your first trip", "Explore different destinations", "Try various activities"],
    }


def _fallback_travel_analysis(trips: list | None = None) -> dict:
    return {
        "totalTrips": len(trips or []),
        "preferredDestinations": ["Mumbai", "Delhi", "Bangalore"],
        "averageBudget": 15000,
        "averageDuration": 3,
        "confidence": 0.3,
        "recommendations": ["Try new destinations", "Explore different activities"],
    }


_FALLBACKS: dict[str, dict] = {
    "budget_optimization": {
        "averageSpending": 15000,
        "potentialSavings": 2000,
        "recommendations": ["Book in advance", "Use public transport", "Choose local accommodations"],
    },
    "destination_preferences": {
        "preferredRegions": ["North India", "South India"],
        "explorationScore": 50,
        "recommendations": ["Try East India", "Explore West India"],
    },
    "seasonal_trends": {
        "peakSeason": "Winter",
        "seasonalConsistency": 60,
        "recommendations": ["Try off-season travel", "Explore monsoon destinations"],
    },
    "group_dynamics": {
        "preferredGroupSize": 2,
        "socialScore": "balanced",
        "recommendations": ["Try solo travel", "Plan group trips"],
    },
    "comprehensive_insights": {
        "userProfile": "Balanced traveler",
        "keyPatterns": ["Prefers cultural destinations", "Moderate budget", "Group travel"],
        "recommendations": ["Explore new regions", "Try different activities"],
        "confidence": 0.5,
    },
}


def _fallback(category: str) -> dict:
    return json.loads(json.dumps(_FALLBACKS[category]))


def fallback_dashboard() -> dict:
    return {
        "userInsights": _fallback("comprehensive_insights"),
        "recentTrips": [],
        "recommendationStats": dict(_EMPTY_STATS),
        "sustainabilityMetrics": dict(_EMPTY_SUSTAINABILITY),
    }


# ── Extractors ─────────────────────────────────────────────────────────────────

def _params(trip: dict) -> dict:
    return trip.get("params") or {}


def _rating(trip: dict) -> float:
    return (trip.get("feedback") or {}).get("rating") or 0


def _parse_date(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def region_for(destination: str) -> str:
    return REGION_MAP.get(destination, "Unknown")


def season_for(month_index: int | None) -> str:
    """month_index is 0-based (0 = January)."""
    if month_index is None:
        return "Winter"
    if 2 <= month_index <= 4:
        return "Spring"
    if 5 <= month_index <= 7:
        return "Summer"
    if 8 <= month_index <= 10:
        return "Autumn"
    return "Winter"


def extract_budget_data(trips: list[dict]) -> list[dict]:
    return [
        {
            "totalBudget":   _params(t).get("budget") or 0,
            "estimatedCost": (t.get("itinerary") or {}).get("estimatedCost") or 0,
            "actualCost":    (t.get("booking") or {}).get("totalCost") or 0,
            "duration":      _params(t).get("duration") or 0,
            "destination":   _params(t).get("destination") or "",
            "date":          t.get("createdAt"),
        }
        for t in trips
    ]


def extract_destination_data(trips: list[dict]) -> list[dict]:
    return [
        {
            "destination":  _params(t).get("destination") or "",
            "region":       region_for(_params(t).get("destination") or ""),
            "interests":    _params(t).get("interests") or [],
            "satisfaction": _rating(t),
            "duration":     _params(t).get("duration") or 0,
            "budget":       _params(t).get("budget") or 0,
            "date":         t.get("createdAt"),
        }
        for t in trips
    ]


def extract_seasonal_data(trips: list[dict]) -> list[dict]:
    rows = []
    for t in trips:
        created = _parse_date(t.get("createdAt"))
        month = created.month - 1 if created else None
        rows.append({
            "month":        month,
            "season":       season_for(month),
            "destination":  _params(t).get("destination") or "",
            "weather":      (t.get("realTimeData") or {}).get("weather"),
            "budget":       _params(t).get("budget") or 0,
            "satisfaction": _rating(t),
        })
    return rows


def extract_group_data(trips: list[dict]) -> list[dict]:
    return [
        {
            "groupSize":    _params(t).get("groupSize") or 1,
            "travelStyle":  _params(t).get("travelStyle") or "balanced",
            "interests":    _params(t).get("interests") or [],
            "budget":       _params(t).get("budget") or 0,
            "satisfaction": _rating(t),
            "activities": [
                a
                for day in (t.get("itinerary") or {}).get("days") or []
                for a in day.get("activities") or []
            ],
        }
        for t in trips
    ]


# ── Metrics ────────────────────────────────────────────────────────────────────

def analysis_confidence(trips: list) -> float:
    if len(trips) < 3:
        return 0.3
    if len(trips) < 10:
        return 0.6
    return 0.9


def _to_number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _trend(recent: list[dict], older: list[dict], field: str) -> float:
    if not recent or not older:
        return 0.0
    recent_avg = sum(_to_number(r.get(field)) for r in recent) / len(recent)
    older_avg = sum(_to_number(r.get(field)) for r in older) / len(older)
    if older_avg == 0:
        return 0.0
    return (recent_avg - older_avg) / older_avg * 100


def calculate_trends(trips: list[dict]) -> dict:
    """Percent change of the newer half of the history against the older half."""
    rows = [
        {"budget": _params(t).get("budget"), "duration": _params(t).get("duration"), "satisfaction": _rating(t)}
        for t in trips
    ]
    half = (len(rows) + 1) // 2
    recent, older = rows[:half], rows[half:]
    return {
        "budgetTrend":       _trend(recent, older, "budget"),
        "durationTrend":     _trend(recent, older, "duration"),
        "satisfactionTrend": _trend(recent, older, "satisfaction"),
    }


def personalized_recommendations(analysis: dict) -> list[dict]:
    recommendations = []
    if isinstance(analysis.get("preferredDestinations"), list):
        recommendations.append({
            "type": "destination",
            "title": "Explore Similar Destinations",
            "description": "Based on your preferences, try these destinations",
            "destinations": analysis["preferredDestinations"][:3],
        })
    if isinstance(analysis.get("budgetOptimization"), list):
        recommendations.append({
            "type": "budget",
            "title": "Budget Optimization",
            "description": "Save money with these tips",
            "tips": analysis["budgetOptimization"][:3],
        })
    return recommendations


def budget_efficiency(budget_data: list[dict]) -> float:
    if not budget_data:
        return 0.0
    total_budget = sum(_to_number(b["totalBudget"]) for b in budget_data)
    total_actual = sum(_to_number(b["actualCost"]) for b in budget_data)
    if total_budget == 0:
        return 0.0
    return (total_budget - total_actual) / total_budget * 100


def destination_diversity(destination_data: list[dict]) -> int:
    return len({d["destination"] for d in destination_data})


def exploration_score(destination_data: list[dict]) -> float:
    if not destination_data:
        return 0.0
    return destination_diversity(destination_data) / len(destination_data) * 100


def seasonal_consistency(seasonal_data: list[dict]) -> float:
    if not seasonal_data:
        return 0.0
    counts = Counter(s["season"] for s in seasonal_data)
    return max(counts.values()) / len(seasonal_data) * 100


def weather_preferences(seasonal_data: list[dict]) -> dict[str, int]:
    counts: Counter = Counter()
    for s in seasonal_data:
        if s.get("weather"):
            counts[s["weather"].get("condition") or "unknown"] += 1
    return dict(counts)


def group_preference(group_data: list[dict]) -> int | None:
    """Most common group size; ties go to the larger group."""
    if not group_data:
        return None
    counts = Counter(g["groupSize"] for g in group_data)
    return max(counts, key=lambda size: (counts[size], size))


def social_score(group_data: list[dict]) -> str:
    solo = sum(1 for g in group_data if g["groupSize"] == 1)
    return "social" if len(group_data) - solo > solo else "solo"


def overall_confidence(analyses: list[dict]) -> float:
    if not analyses:
        return 0.5
    values = [a.get("confidence", 0.5) if isinstance(a.get("confidence"), (int, float)) else 0.5 for a in analyses]
    return sum(values) / len(values)


def _session_id() -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(26))


# ── Service ────────────────────────────────────────────────────────────────────

class AnalyticsService:

    def get_user_trip_history(self, user_id: str, limit: int | None = None) -> list[dict]:
        try:
            return get_store().query(
                "itineraries", {"userId": user_id},
                order_by="createdAt", descending=True, limit=limit,
            )
        except Exception as exc:
            logger.error("Error getting user trip history: %s", exc)
            return []

    def save_analysis(self, user_id: str, category: str, analysis: dict) -> None:
        try:
            get_store().add("user_analytics", {
                **analysis,
                "userId": user_id,
                "category": category,
                "createdAt": now_iso(),
            })
        except Exception as exc:
            logger.error("Error saving analysis %s for %s: %s", category, user_id, exc)

    def _analyse(self, user_id: str, category: str, prompt: str, metrics: dict) -> dict:
        analysis = generate_json(prompt, None, label=category)
        if not isinstance(analysis, dict):
            return _fallback(category)
        enhanced = {**analysis, "userId": user_id, **metrics, "analysisDate": now_iso()}
        self.save_analysis(user_id, category, enhanced)
        return enhanced

    def analyze_travel_patterns(self, user_id: str) -> dict:
        trips = self.get_user_trip_history(user_id)
        if not trips:
            return empty_analysis_result()

        prompt = f"""
Analyze travel patterns from this user's trip history:

User ID: {user_id}
Trip History: {json.dumps(trips[:10], default=str)}

Provide comprehensive analysis including:
1. Preferred destinations and regions
2. Travel frequency and seasonality
3. Budget patterns and spending behavior
4. Group size preferences
5. Activity and interest patterns
6. Booking and planning behavior
7. Satisfaction trends
8. Predictions for future travel

Format as JSON with detailed insights and recommendations.
"""
        analysis = generate_json(prompt, None, label="travel_patterns")
        if not isinstance(analysis, dict):
            return _fallback_travel_analysis(trips)
        enhanced = {
            **analysis,
            "userId": user_id,
            "totalTrips": len(trips),
            "analysisDate": now_iso(),
            "confidence": analysis_confidence(trips),
            "trends": calculate_trends(trips),
            "recommendations": personalized_recommendations(analysis),
        }
        self.save_analysis(user_id, "travel_patterns", enhanced)
        return enhanced

    def analyze_budget_optimization(self, user_id: str) -> dict:
        budget_data = extract_budget_data(self.get_user_trip_history(user_id))
        prompt = f"""
Analyze budget optimization opportunities for this user:

User ID: {user_id}
Budget Data: {json.dumps(budget_data, default=str)}

Provide analysis including:
1. Spending patterns by category
2. Cost per day trends
3. Budget vs actual spending analysis
4. Seasonal price variations
5. Cost-saving opportunities
6. Budget allocation recommendations
7. Price prediction for future trips
8. Alternative cost-effective options

Format as JSON with specific recommendations and savings estimates.
"""
        return self._analyse(user_id, "budget_optimization", prompt, {
            "budgetEfficiency": budget_efficiency(budget_data),
        })

    def analyze_destination_preferences(self, user_id: str) -> dict:
        destination_data = extract_destination_data(self.get_user_trip_history(user_id))
        prompt = f"""
Analyze destination preferences for this user:

User ID: {user_id}
Destination Data: {json.dumps(destination_data, default=str)}

Provide analysis including:
1. Preferred destination types and regions
2. Activity preferences by destination
3. Seasonal destination preferences
4. Budget vs destination correlation
5. Satisfaction by destination type
6. Unexplored destination recommendations
7. Similar destination suggestions
8. Cultural and geographical patterns

Format as JSON with detailed insights and recommendations.
"""
        return self._analyse(user_id, "destination_preferences", prompt, {
            "destinationDiversity": destination_diversity(destination_data),
            "explorationScore": exploration_score(destination_data),
        })

    def analyze_seasonal_trends(self, user_id: str) -> dict:
        seasonal_data = extract_seasonal_data(self.get_user_trip_history(user_id))
        prompt = f"""
Analyze seasonal travel trends for this user:

User ID: {user_id}
Seasonal Data: {json.dumps(seasonal_data, default=str)}

Provide analysis including:
1. Peak travel seasons and months
2. Seasonal destination preferences
3. Weather-based travel patterns
4. Seasonal budget variations
5. Holiday and festival travel patterns
6. Off-season opportunities
7. Seasonal activity preferences
8. Future seasonal predictions

Format as JSON with seasonal insights and recommendations.
"""
        return self._analyse(user_id, "seasonal_trends", prompt, {
            "seasonalConsistency": seasonal_consistency(seasonal_data),
            "weatherPreferences": weather_preferences(seasonal_data),
        })

    def analyze_group_dynamics(self, user_id: str) -> dict:
        group_data = extract_group_data(self.get_user_trip_history(user_id))
        prompt = f"""
Analyze group travel dynamics for this user:

User ID: {user_id}
Group Data: {json.dumps(group_data, default=str)}

Provide analysis including:
1. Preferred group sizes and compositions
2. Group size vs satisfaction correlation
3. Activity preferences by group size
4. Budget implications of group size
5. Social vs solo travel patterns
6. Group decision-making patterns
7. Group activity preferences
8. Recommendations for group travel

Format as JSON with group dynamics insights.
"""
        return self._analyse(user_id, "group_dynamics", prompt, {
            "groupPreference": group_preference(group_data),
            "socialScore": social_score(group_data),
        })

    def generate_user_insights(self, user_id: str) -> dict:
        try:
            analyses = [
                self.analyze_travel_patterns(user_id),
                self.analyze_budget_optimization(user_id),
                self.analyze_destination_preferences(user_id),
                self.analyze_seasonal_trends(user_id),
                self.analyze_group_dynamics(user_id),
            ]
        except Exception as exc:
            logger.error("Error generating comprehensive insights: %s", exc)
            return _fallback("comprehensive_insights")

        prompt = f"""
Generate comprehensive user insights by combining these analyses:

Travel Patterns: {json.dumps(analyses[0], default=str)}
Budget Optimization: {json.dumps(analyses[1], default=str)}
Destination Preferences: {json.dumps(analyses[2], default=str)}
Seasonal Trends: {json.dumps(analyses[3], default=str)}
Group Dynamics: {json.dumps(analyses[4], default=str)}

Provide:
1. Overall user profile summary
2. Key behavioral patterns
3. Personalized recommendations
4. Future travel predictions
5. Optimization opportunities
6. Risk factors and considerations
7. Actionable next steps

Format as JSON with comprehensive insights.
"""
        insights = generate_json(prompt, None, label="comprehensive_insights")
        if not isinstance(insights, dict):
            return _fallback("comprehensive_insights")

        now = now_iso()
        comprehensive = {
            **insights,
            "userId": user_id,
            "analysisDate": now,
            "confidence": overall_confidence(analyses),
            "categories": list(ANALYTICS_CATEGORIES),
            "lastUpdated": now,
        }
        self.save_analysis(user_id, "comprehensive_insights", comprehensive)
        return comprehensive

    def track_recommendation_effectiveness(self, user_id: str, recommendation_id: str, action: str) -> dict:
        tracking = {
            "userId": user_id,
            "recommendationId": recommendation_id,
            "action": action,
            "timestamp": now_iso(),
            "sessionId": _session_id(),
        }
        try:
            get_store().add("recommendation_tracking", tracking)
        except Exception as exc:
            logger.error("Error tracking recommendation effectiveness: %s", exc)
            return {"success": False, "message": "Failed to track recommendation", "error": str(exc)}
        return {"success": True, "message": "Recommendation tracking recorded", "trackingData": tracking}

    def get_recommendation_stats(self, user_id: str) -> dict:
        try:
            rows = get_store().query("recommendation_tracking", {"userId": user_id})
        except Exception as exc:
            logger.error("Error getting recommendation stats: %s", exc)
            return dict(_EMPTY_STATS)
        stats = {**_EMPTY_STATS, "total": len(rows)}
        for row in rows:
            action = row.get("action")
            stats[action] = stats.get(action, 0) + 1
        return stats

    def get_sustainability_metrics(self, user_id: str) -> dict:
        try:
            trips = self.get_user_trip_history(user_id)
            total_carbon = 0.0
            total_impact = 0.0
            for trip in trips:
                total_carbon += sustainability_service.calculate_carbon_footprint(trip, with_tips=False)["totalCarbon"]
                total_impact += sustainability_service.calculate_local_impact(trip)["score"]
        except Exception as exc:
            logger.error("Error getting sustainability metrics: %s", exc)
            return dict(_EMPTY_SUSTAINABILITY)
        n = len(trips)
        return {
            "totalCarbon": total_carbon,
            "averageCarbon": total_carbon / n if n else 0,
            "averageLocalImpact": total_impact / n if n else 0,
            "totalTrips": n,
        }

    def get_analytics_dashboard(self, user_id: str) -> dict:
        try:
            return {
                "userInsights": self.generate_user_insights(user_id),
                "recentTrips": self.get_user_trip_history(user_id, limit=5),
                "recommendationStats": self.get_recommendation_stats(user_id),
                "sustainabilityMetrics": self.get_sustainability_metrics(user_id),
                "generatedAt": now_iso(),
            }
        except Exception as exc:
            logger.error("Error getting analytics dashboard: %s", exc)
            return fallback_dashboard()


analytics_service = AnalyticsService()
