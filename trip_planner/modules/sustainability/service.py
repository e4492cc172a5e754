"""
modules/sustainability/service.py
----------------------------------
Sustainability reporting: the fixed-table scores from scoring.py plus
LLM-written tips, reports and eco alternatives (canned on failure).
"""

from __future__ import annotations

import json
import logging

from trip_planner.db import now_iso
from trip_planner.llm import generate_json
from trip_planner.modules.sustainability import scoring

logger = logging.getLogger(__name__)


FALLBACK_CARBON_TIPS: list[dict] = [
    {
        "category": "transportation",
        "tip": "Use public transportation instead of private vehicles",
        "impact": "Reduce carbon by 50-70%",
        "difficulty": "easy",
    },
    {
        "category": "accommodation",
        "tip": "Choose eco-friendly accommodations with green certifications",
        "impact": "Reduce carbon by 20-30%",
        "difficulty": "medium",
    },
    {
        "category": "activities",
        "tip": "Include more nature-based and cultural activities",
        "impact": "Reduce carbon by 10-20%",
        "difficulty": "easy",
    },
]

FALLBACK_ALTERNATIVES: dict = {
    "transportation": ["Metro/bus instead of taxi", "Walking/cycling for short distances"],
    "accommodation": ["Eco-lodges", "Green hotels", "Homestays"],
    "activities": ["Nature walks", "Cultural museums", "Local cooking classes"],
    "food": ["Street food", "Local restaurants", "Farm-to-table dining"],
    "shopping": ["Local artisan markets", "Handmade souvenirs", "Local crafts"],
}


def _fallback_footprint() -> dict:
    return {
        "totalCarbon": 150,
        "breakdown": {"transportation": 100, "accommodation": 30, "activities": 15, "food": 5},
        "rating": {"level": "moderate", "color": "yellow", "message": "Moderate environmental impact"},
        "recommendations": list(FALLBACK_CARBON_TIPS),
    }


def _fallback_report(footprint: dict | None = None, local_impact: dict | None = None) -> dict:
    report = {
        "overallAssessment": "Moderate sustainability with room for improvement",
        "environmentalImpact": "Average carbon footprint with some eco-friendly choices",
        "socialImpact": "Good local community support",
        "recommendations": [
            "Use more public transport",
            "Choose local accommodations",
            "Support local businesses",
        ],
        "generatedAt": now_iso(),
    }
    if footprint is not None:
        report["carbonFootprint"] = footprint
    if local_impact is not None:
        report["localImpact"] = local_impact
    return report


def _first_days(doc: dict, n: int = 3) -> list:
    days = ((doc or {}).get("itinerary") or {}).get("days")
    return days[:n] if isinstance(days, list) else []


class SustainabilityService:

    def generate_carbon_reduction_tips(self, total: float, breakdown: dict) -> list[dict]:
        prompt = f"""
Generate personalized carbon reduction tips for this travel itinerary:

Total Carbon: {total} kg CO2
Breakdown: {json.dumps(breakdown)}

Provide 5-7 specific, actionable tips to reduce carbon footprint, focusing on:
1. Transportation alternatives
2. Accommodation choices
3. Activity selections
4. Food choices
5. General eco-friendly practices

Format as JSON array with tip objects containing:
- category: "transportation/accommodation/activities/food/general"
- tip: "specific actionable advice"
- impact: "estimated carbon reduction"
- difficulty: "easy/medium/hard"
"""
        tips = generate_json(prompt, lambda: list(FALLBACK_CARBON_TIPS), kind="array", label="carbon_tips")
        return tips if isinstance(tips, list) else list(FALLBACK_CARBON_TIPS)

    def calculate_carbon_footprint(self, doc: dict, with_tips: bool = True) -> dict:
        try:
            total, breakdown = scoring.carbon_breakdown(doc)
            result = {
                "totalCarbon": scoring.round_half_up(total, 2),
                "breakdown": breakdown,
                "rating": scoring.carbon_rating(total),
            }
            if with_tips:
                result["recommendations"] = self.generate_carbon_reduction_tips(total, breakdown)
            return result
        except Exception as exc:
            logger.error("Error calculating carbon footprint: %s", exc)
            return _fallback_footprint()

    def calculate_local_impact(self, doc: dict) -> dict:
        return scoring.calculate_local_impact(doc)

    def generate_sustainability_report(self, doc: dict) -> dict:
        footprint = self.calculate_carbon_footprint(doc)
        local_impact = self.calculate_local_impact(doc)

        prompt = f"""
Generate a comprehensive sustainability report for this travel itinerary:

Carbon Footprint: {footprint["totalCarbon"]} kg CO2
Local Impact Score: {local_impact["score"]}/100

Itinerary: {json.dumps(_first_days(doc), default=str)}

Provide:
1. Overall sustainability assessment
2. Environmental impact analysis
3. Social and economic impact
4. Specific recommendations for improvement
5. Eco-friendly alternatives
6. Long-term sustainability goals

Format as JSON with detailed analysis and actionable recommendations.
"""
        report = generate_json(prompt, None, label="sustainability_report")
        if not isinstance(report, dict):
            return _fallback_report(footprint, local_impact)
        return {
            **report,
            "carbonFootprint": footprint,
            "localImpact": local_impact,
            "generatedAt": now_iso(),
        }

    def get_eco_friendly_alternatives(self, doc: dict) -> dict:
        prompt = f"""
Suggest eco-friendly alternatives for this travel itinerary:

Itinerary: {json.dumps(_first_days(doc), default=str)}

Provide alternatives for:
1. Transportation methods
2. Accommodation options
3. Activities and experiences
4. Food and dining choices
5. Shopping and souvenirs

Format as JSON with specific alternatives and their environmental benefits.
"""
        alternatives = generate_json(prompt, lambda: dict(FALLBACK_ALTERNATIVES), label="eco_alternatives")
        return alternatives if isinstance(alternatives, dict) else dict(FALLBACK_ALTERNATIVES)

    def track_progress(self, user_id: str, doc: dict) -> dict:
        return {
            "userId": user_id,
            "tripId": (doc or {}).get("id"),
            "carbonSaved": scoring.carbon_saved(doc),
            "localBusinessesSupported": scoring.count_local_businesses(doc),
            "ecoActivitiesCompleted": scoring.count_eco_activities(doc),
            "sustainabilityScore": scoring.overall_score(doc),
            "achievements": scoring.achievements(doc),
            "nextGoals": scoring.next_goals(doc),
        }


sustainability_service = SustainabilityService()
