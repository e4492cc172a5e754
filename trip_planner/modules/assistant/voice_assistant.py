"""
modules/assistant/voice_assistant.py
-------------------------------------
Hands-free commands: transcript → keyword match → handler.

Speech-to-text and text-to-speech are mocked. A text `audio_data` is treated
as the transcript itself, so the API can be driven from a chat box.

Each handler asks the LLM to pull a slot set out of the transcript. When
that fails the handler answers with a follow-up question and its own
`nextStep`, so the client can keep the conversation going.
"""

from __future__ import annotations

import logging
import random
from typing import Callable
from urllib.parse import quote

from trip_planner.db import now_iso
from trip_planner.llm import generate_json

logger = logging.getLogger(__name__)

MOCK_TRANSCRIPT = "plan a trip to goa for 3 days"

# Declaration order is match priority
VOICE_COMMANDS: dict[str, dict] = {
    "plan_trip": {
        "keywords": ["plan trip", "plan a trip", "create itinerary", "plan vacation", "trip planning"],
        "action": "generateItinerary",
        "description": "Start planning a new trip",
    },
    "modify_itinerary": {
        "keywords": ["modify", "change", "update", "edit itinerary"],
        "action": "modifyItinerary",
        "description": "Modify existing itinerary",
    },
    "weather_check": {
        "keywords": ["weather", "forecast", "temperature", "rain"],
        "action": "checkWeather",
        "description": "Check weather for destination",
    },
    "find_places": {
        "keywords": ["find", "search", "nearby", "places", "restaurants"],
        "action": "searchPlaces",
        "description": "Search for places and attractions",
    },
    "book_activity": {
        "keywords": ["book", "reserve", "buy tickets", "booking"],
        "action": "bookActivity",
        "description": "Book activities and experiences",
    },
    "navigation": {
        "keywords": ["navigate", "directions", "how to reach", "route"],
        "action": "getDirections",
        "description": "Get navigation directions",
    },
    "translate": {
        "keywords": ["translate", "what does this mean", "language"],
        "action": "translateText",
        "description": "Translate text or phrases",
    },
    "emergency": {
        "keywords": ["help", "emergency", "sos", "assistance"],
        "action": "emergencyAssistance",
        "description": "Get emergency assistance",
    },
}

RESPONSE_TEMPLATES: dict[str, list[str]] = {
    "greeting": [
        "Hello! I'm your AI travel assistant. How can I help you plan your perfect trip?",
        "Welcome! I'm here to help you create amazing travel experiences. What would you like to do?",
        "Hi there! Ready to explore the world? Tell me about your travel plans.",
    ],
    "confirmation": [
        "Got it! Let me help you with that.",
        "Perfect! I'll take care of that for you.",
        "Understood. Working on it right away.",
    ],
    "error": [
        "I'm sorry, I didn't quite catch that. Could you please repeat?",
        "I'm having trouble understanding. Can you try again?",
        "Let me help you with something else. What would you like to do?",
    ],
}

EMERGENCY_CONTACTS = {"police": "100", "medical": "108", "fire": "101", "general": "112"}


def random_response(template: str) -> str:
    return random.choice(RESPONSE_TEMPLATES[template])


def find_matching_command(transcript: str) -> dict | None:
    lowered = transcript.lower()
    for name, command in VOICE_COMMANDS.items():
        if any(keyword in lowered for keyword in command["keywords"]):
            return {"name": name, **command}
    return None


def _extract(transcript: str, instruction: str, schema: str, label: str) -> dict | None:
    prompt = f"""
{instruction}

Transcript: "{transcript}"

Return in JSON format:
{schema}
"""
    data = generate_json(prompt, None, label=label)
    return data if isinstance(data, dict) else None


class VoiceAssistantService:

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[str, str | None], dict]] = {
            "generateItinerary": self.handle_trip_planning,
            "modifyItinerary": self.handle_itinerary_modification,
            "checkWeather": self.handle_weather_check,
            "searchPlaces": self.handle_place_search,
            "bookActivity": self.handle_booking,
            "getDirections": self.handle_navigation,
            "translateText": self.handle_translation,
            "emergencyAssistance": self.handle_emergency,
        }

    def speech_to_text(self, audio_data) -> str:
        if isinstance(audio_data, str) and audio_data.strip():
            return audio_data.strip()
        return MOCK_TRANSCRIPT

    def process_voice_command(self, audio_data, user_id: str | None = None) -> dict:
        try:
            transcript = self.speech_to_text(audio_data)
            command = find_matching_command(transcript)
            if command is None:
                return {"success": False, "message": random_response("error"), "transcript": transcript}

            result = self._handlers[command["action"]](transcript, user_id)
            return {"success": True, "command": command["action"], "result": result, "transcript": transcript}
        except Exception as exc:
            logger.error("Error processing voice command: %s", exc)
            return {
                "success": False,
                "message": "Sorry, I encountered an error. Please try again.",
                "error": str(exc),
            }

    # ── handlers ─────────────────────────────────────────────────────────

    def handle_trip_planning(self, transcript: str, user_id: str | None = None) -> dict:
        data = _extract(
            transcript,
            "Extract trip planning information from this voice command.",
            '{"destination", "duration", "budget", "interests": [], "travelStyle", '
            '"groupSize", "startDate", "specialRequirements": []}\n'
            "If any information is not mentioned, use null or empty array.",
            "voice_trip_planning",
        )
        if data is None:
            return {
                "message": "I heard you want to plan a trip. Could you tell me your destination "
                           "and how many days you want to travel?",
                "nextStep": "get_more_info",
            }
        return {
            "message": f"Great! I'll help you plan a {data.get('duration')}-day trip to "
                       f"{data.get('destination')}. Let me create a personalized itinerary for you.",
            "extractedData": data,
            "nextStep": "confirm_details",
        }

    def handle_itinerary_modification(self, transcript: str, user_id: str | None = None) -> dict:
        data = _extract(
            transcript,
            "Extract the modification request from this voice command.",
            '{"modificationType": "add/remove/change/reorder", "target", "details", "day"}',
            "voice_modification",
        )
        if data is None:
            return {
                "message": "I heard you want to modify your itinerary. What specific changes would you like to make?",
                "nextStep": "get_modification_details",
            }
        return {
            "message": f"I understand you want to {data.get('modificationType')} {data.get('target')}. "
                       "Let me help you with that.",
            "modification": data,
            "nextStep": "apply_modification",
        }

    def handle_weather_check(self, transcript: str, user_id: str | None = None) -> dict:
        data = _extract(
            transcript,
            "Extract location and date from this weather request.",
            '{"location", "date": "today if not mentioned", "timeframe": "today/tomorrow/this week/specific date"}',
            "voice_weather",
        )
        if data is None:
            return {
                "message": "I can help you check the weather. Which location would you like to know about?",
                "nextStep": "get_location",
            }
        weather = {
            "location": data.get("location"),
            "temperature": "28°C",
            "condition": "Sunny",
            "humidity": "65%",
            "windSpeed": "12 km/h",
            "forecast": "Clear skies with light breeze",
        }
        return {
            "message": f"The weather in {weather['location']} is {weather['temperature']} and "
                       f"{weather['condition']}. {weather['forecast']}",
            "weatherData": weather,
            "nextStep": "weather_details",
        }

    def handle_place_search(self, transcript: str, user_id: str | None = None) -> dict:
        data = _extract(
            transcript,
            "Extract search parameters from this place search request.",
            '{"query", "location", "type": "restaurant/attraction/hotel/activity", "filters": []}',
            "voice_place_search",
        )
        if data is None:
            return {"message": "I can help you find places. What are you looking for?", "nextStep": "get_search_query"}
        results = [
            {"name": "Popular Restaurant", "type": "restaurant", "rating": "4.5", "distance": "0.5 km",
             "description": "Great local cuisine"},
            {"name": "Historic Landmark", "type": "attraction", "rating": "4.8", "distance": "1.2 km",
             "description": "Must-visit historical site"},
        ]
        return {
            "message": f'I found {len(results)} places matching "{data.get("query")}". Here are the top results.',
            "searchResults": results,
            "nextStep": "show_results",
        }

    def handle_booking(self, transcript: str, user_id: str | None = None) -> dict:
        data = _extract(
            transcript,
            "Extract booking information from this voice command.",
            '{"item": "hotel/activity/restaurant/transport", "name", "date", "time", "quantity"}',
            "voice_booking",
        )
        if data is None:
            return {"message": "I can help you make bookings. What would you like to book?", "nextStep": "get_booking_details"}
        return {
            "message": f"I'll help you book {data.get('item')}. Let me check availability and pricing for you.",
            "bookingInfo": data,
            "nextStep": "confirm_booking",
        }

    def handle_navigation(self, transcript: str, user_id: str | None = None) -> dict:
        data = _extract(
            transcript,
            "Extract navigation information from this voice command.",
            '{"origin", "destination", "mode": "driving/walking/public transport", "preferences": []}',
            "voice_navigation",
        )
        if data is None:
            return {"message": "I can help you with directions. Where would you like to go?", "nextStep": "get_destination"}
        navigation = {
            "origin": data.get("origin"),
            "destination": data.get("destination"),
            "distance": "5.2 km",
            "duration": "15 minutes",
            "mode": data.get("mode"),
            "steps": [
                "Head north on Main Street",
                "Turn right at the traffic light",
                "Continue for 2 km",
                "Arrive at destination",
            ],
        }
        return {
            "message": f"I'll guide you from {navigation['origin']} to {navigation['destination']}. "
                       f"The journey will take about {navigation['duration']}.",
            "navigationData": navigation,
            "nextStep": "start_navigation",
        }

    def handle_translation(self, transcript: str, user_id: str | None = None) -> dict:
        data = _extract(
            transcript,
            "Extract the translation request from this voice command.",
            '{"text", "targetLanguage", "context"}',
            "voice_translation",
        )
        if data is None:
            return {"message": "I can help you translate. What would you like to translate?", "nextStep": "get_translation_text"}
        translation = {
            "original": data.get("text"),
            "translated": "Translated text in target language",
            "language": data.get("targetLanguage"),
            "pronunciation": "Pronunciation guide",
        }
        return {
            "message": f'"{translation["original"]}" translates to "{translation["translated"]}" '
                       f'in {translation["language"]}.',
            "translation": translation,
            "nextStep": "show_translation",
        }

    def handle_emergency(self, transcript: str, user_id: str | None = None) -> dict:
        data = _extract(
            transcript,
            "Extract emergency information from this voice command.",
            '{"emergencyType": "medical/police/fire/other", "location", "description", "urgency": "high/medium/low"}',
            "voice_emergency",
        )
        if data is None:
            return {
                "message": "I understand you need emergency assistance. I'm here to help. "
                           "What type of emergency are you experiencing?",
                "contacts": dict(EMERGENCY_CONTACTS),
                "nextStep": "get_emergency_details",
            }
        return {
            "message": f"I understand you need {data.get('emergencyType')} assistance. "
                       "I'm connecting you to the appropriate emergency services.",
            "emergencyInfo": data,
            "contacts": dict(EMERGENCY_CONTACTS),
            "nextStep": "connect_emergency",
        }

    # ── responses ────────────────────────────────────────────────────────

    def generate_voice_response(self, response: dict) -> dict:
        message = response.get("message") or ""
        return {
            "text": message,
            "audio": self.text_to_speech(message),
            "nextStep": response.get("nextStep"),
            "data": response.get("data"),
            "timestamp": now_iso(),
        }

    def text_to_speech(self, text: str) -> dict:
        return {
            "audioUrl": f"https://api.example.com/tts?text={quote(text)}",
            "duration": len(text) * 0.1,
            "format": "mp3",
        }

    def get_available_commands(self) -> list[dict]:
        return [
            {"name": name, "keywords": list(cmd["keywords"]), "description": cmd["description"]}
            for name, cmd in VOICE_COMMANDS.items()
        ]

    def get_status(self) -> dict:
        return {
            "active": True,
            "language": "en",
            "supportedCommands": len(VOICE_COMMANDS),
            "lastActivity": now_iso(),
        }


voice_assistant_service = VoiceAssistantService()
