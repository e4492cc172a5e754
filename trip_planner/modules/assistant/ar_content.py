"""
modules/assistant/ar_content.py
--------------------------------
AR (augmented-reality) content for landmarks: descriptions, photo filters,
games, social posts and navigation hints. The client renders the overlays;
this module only supplies the content JSON.
"""

from __future__ import annotations

import json
import logging
import re

from trip_planner.llm import generate_json

logger = logging.getLogger(__name__)

AR_LANDMARKS: dict[str, list[dict]] = {
    "Mumbai": [
        {
            "name": "Gateway of India",
            "coordinates": {"lat": 18.9220, "lng": 72.8347},
            "arFeatures": ["Historical overlay", "360° view", "Photo spots"],
            "historicalPeriod": "British Raj (1911)",
            "culturalSignificance": "Symbol of Mumbai and India's independence",
        },
        {
            "name": "Chhatrapati Shivaji Terminus",
            "coordinates": {"lat": 18.9398, "lng": 72.8355},
            "arFeatures": ["Architectural details", "Historical timeline", "Virtual tour"],
            "historicalPeriod": "Victorian Gothic (1887)",
            "culturalSignificance": "UNESCO World Heritage Site",
        },
    ],
    "Delhi": [
        {
            "name": "Red Fort",
            "coordinates": {"lat": 28.6562, "lng": 77.2410},
            "arFeatures": ["Mughal architecture overlay", "Historical reenactment", "Sound effects"],
            "historicalPeriod": "Mughal Empire (1639)",
            "culturalSignificance": "Symbol of Mughal power and Indian independence",
        },
        {
            "name": "India Gate",
            "coordinates": {"lat": 28.6129, "lng": 77.2295},
            "arFeatures": ["War memorial details", "Flame animation", "Historical photos"],
            "historicalPeriod": "British Raj (1931)",
            "culturalSignificance": "Memorial to Indian soldiers",
        },
    ],
    "Bangalore": [
        {
            "name": "Vidhana Soudha",
            "coordinates": {"lat": 12.9791, "lng": 77.5913},
            "arFeatures": ["Architectural analysis", "Government building info", "Light show"],
            "historicalPeriod": "Modern India (1956)",
            "culturalSignificance": "Seat of Karnataka state legislature",
        },
    ],
    "Chennai": [
        {
            "name": "Kapaleeshwarar Temple",
            "coordinates": {"lat": 13.0330, "lng": 80.2697},
            "arFeatures": ["Temple architecture", "Religious significance", "Cultural stories"],
            "historicalPeriod": "Chola Dynasty (7th century)",
            "culturalSignificance": "Important Hindu temple",
        },
    ],
}

AR_EXPERIENCES: dict[str, dict] = {
    "historical": {
        "name": "Historical Reenactment",
        "description": "Experience historical events through AR",
        "features": ["3D historical figures", "Period-accurate environments", "Interactive timeline"],
    },
    "cultural": {
        "name": "Cultural Immersion",
        "description": "Learn about local culture through AR",
        "features": ["Traditional dance tutorials", "Cultural artifact exploration", "Language learning"],
    },
    "culinary": {
        "name": "Culinary Journey",
        "description": "Explore food culture through AR",
        "features": ["Recipe demonstrations", "Ingredient identification", "Restaurant recommendations"],
    },
    "nature": {
        "name": "Nature Exploration",
        "description": "Discover natural wonders through AR",
        "features": ["Wildlife identification", "Geological information", "Ecosystem education"],
    },
}

ACCESSIBILITY_FEATURES: dict[str, list[str]] = {
    "visual": ["High contrast mode", "Large text options", "Color blind friendly filters", "Audio descriptions"],
    "auditory": ["Visual sound indicators", "Subtitles for audio content", "Haptic feedback", "Sign language support"],
    "motor": ["Voice commands", "Gesture recognition", "One-handed operation", "Switch control support"],
    "cognitive": ["Simplified interfaces", "Step-by-step guidance", "Pause and resume features", "Clear instructions"],
}


def landmark_hashtag(landmark: str) -> str:
    return "#" + re.sub(r"\s+", "", landmark.lower())


def _first_days(itinerary: dict | None, n: int = 3) -> list:
    return (((itinerary or {}).get("itinerary") or {}).get("days") or [])[:n]


# ── canned content ─────────────────────────────────────────────────────────────

def fallback_ar_content(landmark: str, destination: str) -> dict:
    return {
        "landmark": landmark,
        "destination": destination,
        "arContent": {
            "historicalInfo": f"Historical information about {landmark}",
            "culturalSignificance": f"Cultural importance of {landmark}",
            "interactiveElements": ["Basic AR overlay", "Photo opportunities"],
            "photoSpots": ["Main entrance", "Best viewing angle"],
            "localLegends": [f"Local stories about {landmark}"],
            "bestTimes": "Early morning or late afternoon",
            "accessibility": "Check with venue for accessibility details",
            "nearbyAttractions": ["Nearby points of interest"],
            "arOverlay": "Basic landmark information",
            "socialMoments": ["Instagram-worthy spots"],
        },
        "arFeatures": {
            "historicalTimeline": "Interactive timeline available",
            "3dModels": "3D models of the landmark",
            "audioGuide": "Audio narration available",
            "photoFilters": "Historical period filters",
            "gamification": "AR scavenger hunt available",
        },
    }


def fallback_ar_experiences(itinerary: dict | None = None) -> dict:
    return {
        "experiences": [
            {
                "day": 1,
                "arActivities": [
                    "Historical landmark exploration",
                    "Cultural photo challenges",
                    "Local cuisine AR guide",
                ],
            }
        ]
    }


def fallback_photo_filters(landmark: str) -> dict:
    return {
        "filters": [
            {
                "name": "Historical",
                "description": "Transport yourself to the historical period",
                "effects": ["Sepia tone", "Vintage frame", "Historical overlay"],
            },
            {
                "name": "Cultural",
                "description": "Celebrate local culture",
                "effects": ["Traditional patterns", "Cultural colors", "Local motifs"],
            },
        ]
    }


def fallback_ar_games() -> dict:
    return {
        "games": [
            {
                "name": "Landmark Scavenger Hunt",
                "description": "Find and photograph specific architectural details",
                "rewards": ["Badges", "Points", "Social recognition"],
            },
            {
                "name": "Cultural Quiz",
                "description": "Answer questions about local culture and history",
                "rewards": ["Knowledge points", "Achievement badges"],
            },
        ]
    }


def fallback_social_content(landmark: str) -> dict:
    return {
        "instagram": {
            "storyTemplate": f"Exploring {landmark} with AR! #travel #ar {landmark_hashtag(landmark)}",
            "hashtags": ["#travel", "#ar", "#explore", "#india"],
        },
        "tiktok": {
            "videoIdea": f"AR tour of {landmark} - before and after",
            "hashtags": ["#travel", "#ar", "#tiktok"],
        },
    }


def fallback_ar_navigation(origin: str, destination: str) -> dict:
    return {
        "route": f"{origin} to {destination}",
        "waypoints": ["Key landmarks along the route"],
        "arMarkers": ["AR direction arrows", "Distance indicators"],
        "safetyTips": ["Stay aware of surroundings", "Keep device charged"],
    }


class ARService:

    def generate_ar_content(self, landmark: str, destination: str) -> dict:
        prompt = f"""
Create comprehensive AR content for {landmark} in {destination}.

Provide historical information and timeline, cultural significance, interactive AR
elements, photo spots, local legends, best times for AR exploration, accessibility
information, nearby attractions, AR overlay information and social sharing moments.

Format as JSON:
{{
  "landmark": "{landmark}",
  "destination": "{destination}",
  "arContent": {{
    "historicalInfo": "", "culturalSignificance": "", "interactiveElements": [],
    "photoSpots": [], "localLegends": [], "bestTimes": "", "accessibility": "",
    "nearbyAttractions": [], "arOverlay": "", "socialMoments": []
  }},
  "arFeatures": {{
    "historicalTimeline": "", "3dModels": "", "audioGuide": "",
    "photoFilters": "", "gamification": ""
  }}
}}
"""
        return generate_json(prompt, lambda: fallback_ar_content(landmark, destination), label="ar_content")

    def get_ar_landmarks(self, destination: str) -> list[dict]:
        return AR_LANDMARKS.get(destination, [])

    def get_ar_experience_categories(self) -> dict:
        return AR_EXPERIENCES

    def generate_ar_experiences(self, itinerary: dict, interests: list[str] | None = None) -> dict:
        prompt = f"""
Recommend AR experiences for this itinerary based on user interests:

Itinerary: {json.dumps(_first_days(itinerary), default=str)}
User Interests: {", ".join(interests or [])}
Available experience types: {", ".join(AR_EXPERIENCES)}

Provide AR experiences for each day, landmark-specific AR content, interactive
activities, photo opportunities, educational content and social sharing moments.

Format as JSON with daily AR recommendations.
"""
        return generate_json(prompt, lambda: fallback_ar_experiences(itinerary), label="ar_experiences")

    def generate_ar_photo_filters(self, landmark: str, destination: str) -> dict:
        prompt = f"""
Create AR photo filter suggestions for {landmark} in {destination}:

Include historical period, cultural theme, weather-based, time-of-day,
special effect and social-media-ready filters.

Format as JSON with filter details.
"""
        return generate_json(prompt, lambda: fallback_photo_filters(landmark), label="ar_photo_filters")

    def generate_ar_games(self, itinerary: dict) -> dict:
        prompt = f"""
Create AR games and challenges for this travel itinerary:

Itinerary: {json.dumps(_first_days(itinerary), default=str)}

Include scavenger hunts, photo challenges, cultural quizzes, historical puzzles,
social challenges and educational games.

Format as JSON with game details and rewards.
"""
        return generate_json(prompt, fallback_ar_games, label="ar_games")

    def generate_ar_social_content(self, landmark: str, destination: str) -> dict:
        prompt = f"""
Create AR social sharing content for {landmark} in {destination}:

Include Instagram story templates, TikTok video ideas, Facebook post suggestions,
Twitter moment ideas, hashtag recommendations and caption templates.

Format as JSON with platform-specific content.
"""
        return generate_json(prompt, lambda: fallback_social_content(landmark), label="ar_social_content")

    def get_ar_accessibility_features(self) -> dict:
        return {k: list(v) for k, v in ACCESSIBILITY_FEATURES.items()}

    def generate_ar_navigation(self, origin: str, destination: str, landmarks: list[str] | None = None) -> dict:
        prompt = f"""
Create AR navigation assistance from {origin} to {destination}:

Landmarks to highlight: {", ".join(landmarks or [])}

Include AR waypoint markers, distance indicators, landmark information,
alternative routes, safety tips and photo opportunities along the way.

Format as JSON with navigation details.
"""
        return generate_json(prompt, lambda: fallback_ar_navigation(origin, destination), label="ar_navigation")


ar_service = ARService()
