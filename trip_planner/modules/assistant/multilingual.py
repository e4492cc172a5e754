"""
modules/assistant/multilingual.py
----------------------------------
Indian-language support: translation, travel phrases, cultural context.

Translation and phrase generation go through the LLM; the lookup tables
below answer everything else and back every fallback.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

from trip_planner.llm import generate_json, generate_text

logger = logging.getLogger(__name__)

LANGUAGES: dict[str, dict] = {
    "hi": {"name": "Hindi",     "native": "हिन्दी",   "region": "North India"},
    "bn": {"name": "Bengali",   "native": "বাংলা",    "region": "West Bengal"},
    "te": {"name": "Telugu",    "native": "తెలుగు",   "region": "Telangana, Andhra Pradesh"},
    "mr": {"name": "Marathi",   "native": "मराठी",    "region": "Maharashtra"},
    "ta": {"name": "Tamil",     "native": "தமிழ்",    "region": "Tamil Nadu"},
    "gu": {"name": "Gujarati",  "native": "ગુજરાતી",  "region": "Gujarat"},
    "kn": {"name": "Kannada",   "native": "ಕನ್ನಡ",    "region": "Karnataka"},
    "ml": {"name": "Malayalam", "native": "മലയാളം",   "region": "Kerala"},
    "pa": {"name": "Punjabi",   "native": "ਪੰਜਾਬੀ",   "region": "Punjab"},
    "or": {"name": "Odia",      "native": "ଓଡ଼ିଆ",    "region": "Odisha"},
    "as": {"name": "Assamese",  "native": "অসমীয়া",  "region": "Assam"},
    "ne": {"name": "Nepali",    "native": "नेपाली",   "region": "Sikkim"},
    "en": {"name": "English",   "native": "English",  "region": "All India"},
}

REGIONAL_CONTEXT: dict[str, dict] = {
    "North India": {
        "languages": ["hi", "pa", "en"],
        "culture": "Rich Mughal heritage, Bollywood, diverse cuisine",
        "greetings": ["Namaste", "Sat Sri Akal", "Hello"],
    },
    "South India": {
        "languages": ["te", "ta", "kn", "ml", "en"],
        "culture": "Temple architecture, classical music, spicy cuisine",
        "greetings": ["Namaskaram", "Vanakkam", "Hello"],
    },
    "East India": {
        "languages": ["bn", "or", "as", "en"],
        "culture": "Literature, festivals, fish curry",
        "greetings": ["Namaskar", "Namaskar", "Hello"],
    },
    "West India": {
        "languages": ["mr", "gu", "en"],
        "culture": "Maritime heritage, business culture, diverse food",
        "greetings": ["Namaskar", "Jai Shri Krishna", "Hello"],
    },
}

CITY_REGIONS: dict[str, str] = {
    "Mumbai": "West India", "Delhi": "North India", "Bangalore": "South India",
    "Chennai": "South India", "Kolkata": "East India", "Hyderabad": "South India",
    "Pune": "West India", "Ahmedabad": "West India", "Jaipur": "North India",
    "Goa": "West India", "Kochi": "South India", "Mysore": "South India",
    "Udaipur": "North India", "Jodhpur": "North India", "Varanasi": "North India",
    "Agra": "North India", "Amritsar": "North India", "Chandigarh": "North India",
    "Bhubaneswar": "East India", "Guwahati": "East India",
}
DEFAULT_REGION = "North India"

FALLBACK_PHRASES: dict[str, dict] = {
    "hi": {
        "greetings": ["नमस्ते (Namaste)", "आप कैसे हैं? (How are you?)"],
        "directions": ["कृपया मार्ग बताएं (Please show the way)", "यहाँ कैसे पहुँचें? (How to reach here?)"],
        "food": ["मुझे भूख लगी है (I am hungry)", "यह क्या है? (What is this?)"],
        "emergency": ["मदद! (Help!)", "पुलिस! (Police!)"],
    },
    "te": {
        "greetings": ["నమస్కారం (Namaskaram)", "మీరు ఎలా ఉన్నారు? (How are you?)"],
        "directions": ["దయచేసి మార్గం చూపించండి (Please show the way)", "ఇక్కడ ఎలా చేరుకోవాలి? (How to reach here?)"],
        "food": ["నాకు ఆకలి వేస్తోంది (I am hungry)", "ఇది ఏమిటి? (What is this?)"],
        "emergency": ["సహాయం! (Help!)", "పోలీస్! (Police!)"],
    },
    "ta": {
        "greetings": ["வணக்கம் (Vanakkam)", "நீங்கள் எப்படி இருக்கிறீர்கள்? (How are you?)"],
        "directions": ["தயவுசெய்து வழி காட்டுங்கள் (Please show the way)", "இங்கே எப்படி வருவது? (How to reach here?)"],
        "food": ["எனக்கு பசிக்கிறது (I am hungry)", "இது என்ன? (What is this?)"],
        "emergency": ["உதவி! (Help!)", "காவல்துறை! (Police!)"],
    },
    "bn": {
        "greetings": ["নমস্কার (Namaskar)", "আপনি কেমন আছেন? (How are you?)"],
        "directions": ["দয়া করে পথ দেখান (Please show the way)", "এখানে কীভাবে আসব? (How to reach here?)"],
        "food": ["আমার ক্ষুধা পেয়েছে (I am hungry)", "এটা কী? (What is this?)"],
        "emergency": ["সাহায্য! (Help!)", "পুলিশ! (Police!)"],
    },
}

FALLBACK_CULTURAL_TIPS: dict[str, list[str]] = {
    "etiquette": [
        "Remove shoes before entering homes and temples",
        "Use right hand for eating and greeting",
        "Dress modestly, especially at religious sites",
    ],
    "communication": [
        "Learn basic greetings in local language",
        "Be patient and respectful in conversations",
        "Avoid pointing with index finger",
    ],
    "dining": [
        "Try local cuisine and street food",
        "Ask about ingredients if you have allergies",
        "Don't waste food - it's considered disrespectful",
    ],
    "photography": [
        "Ask permission before photographing people",
        'Respect "no photography" signs at religious sites',
        "Be mindful of cultural sensitivities",
    ],
}


def region_for(destination: str | None) -> str:
    return CITY_REGIONS.get(destination or "", DEFAULT_REGION)


def format_indian_number(amount) -> str:
    """1234567.5 -> '12,34,567.5' (lakh/crore grouping, up to 3 decimals)."""
    value = round(float(amount), 3)
    sign = "-" if value < 0 else ""
    whole, _, frac = f"{abs(value):.3f}".partition(".")
    frac = frac.rstrip("0")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    return f"{sign}{whole}.{frac}" if frac else f"{sign}{whole}"


class MultilingualService:

    def translate_content(self, content, target_language: str, source_language: str = "en"):
        prompt = f"""
Translate the following travel content from {source_language} to {target_language}:

Content: {json.dumps(content, ensure_ascii=False, default=str)}

Requirements:
1. Maintain cultural context and local terminology
2. Use appropriate regional expressions
3. Keep travel-specific terms clear and understandable
4. Preserve formatting and structure
5. Include cultural nuances where relevant

Return the translated content in the same JSON structure.
"""
        return generate_json(prompt, content, label="translate_content")

    def get_cultural_greetings(self, region: str) -> list[str]:
        context = REGIONAL_CONTEXT.get(region)
        return list(context["greetings"]) if context else ["Hello", "Namaste"]

    def get_travel_phrases(self, destination: str, language: str) -> dict:
        prompt = f"""
Generate essential travel phrases in {language} for visiting {destination}:

Include:
1. Basic greetings and politeness
2. Directions and transportation
3. Food and dining
4. Shopping and bargaining
5. Emergency situations
6. Cultural etiquette

Format as JSON with categories and phrases.
"""
        return generate_json(prompt, lambda: self.get_fallback_phrases(language), label="travel_phrases")

    @staticmethod
    def get_fallback_phrases(language: str) -> dict:
        return FALLBACK_PHRASES.get(language) or FALLBACK_PHRASES["hi"]

    def get_cultural_context(self, destination: str) -> dict:
        region = region_for(destination)
        context = REGIONAL_CONTEXT.get(region)
        return {
            "region": region,
            "languages": context["languages"] if context else ["en"],
            "culture": context["culture"] if context else "Rich cultural heritage",
            "greetings": context["greetings"] if context else ["Hello", "Namaste"],
        }

    def generate_localized_itinerary(self, itinerary: dict, language: str) -> dict:
        prompt = f"""
Localize this travel itinerary for {language} speakers:

Itinerary: {json.dumps(itinerary, ensure_ascii=False, default=str)}

Requirements:
1. Translate all text content to {language}
2. Adapt cultural references for local context
3. Include local customs and etiquette
4. Suggest region-specific alternatives
5. Add local language phrases for each activity
6. Maintain the JSON structure

Return the localized itinerary.
"""
        return generate_json(prompt, itinerary, label="localized_itinerary")

    def get_localized_date_time(self, value: datetime, language: str) -> dict | str:
        if language not in LANGUAGES:
            return value.date().isoformat()
        return {
            "date": value.strftime("%d/%m/%Y"),
            "time": value.strftime("%I:%M:%S %p").lower(),
            "day": value.strftime("%A"),
            "month": value.strftime("%B"),
        }

    def get_localized_currency(self, amount, region: str | None = None) -> str:
        # Every region in REGIONAL_CONTEXT settles in rupees
        return f"₹{format_indian_number(amount)}"

    def get_supported_languages(self, destination: str) -> list[dict]:
        context = REGIONAL_CONTEXT.get(region_for(destination))
        if not context:
            return [{"code": "en", "name": "English", "native": "English"}]
        return [
            {
                "code": code,
                "name": LANGUAGES.get(code, {}).get("name", code),
                "native": LANGUAGES.get(code, {}).get("native", code),
            }
            for code in context["languages"]
        ]

    def detect_language(self, text: str) -> str:
        prompt = f"""
Detect the language of this text and return the language code:

Text: "{text}"

Return only the language code (e.g., 'hi', 'en', 'te', 'ta', 'bn').
"""
        detected = generate_text(prompt, "en", label="detect_language").strip().strip("'\"").lower()
        return detected if detected in LANGUAGES else "en"

    def get_cultural_tips(self, destination: str, language: str = "en") -> dict:
        prompt = f"""
Provide cultural tips for {language} speakers visiting {destination}:

Include:
1. Cultural etiquette and customs
2. Dress code recommendations
3. Religious and social norms
4. Communication styles
5. Food and dining customs
6. Photography and social media etiquette
7. Gift-giving traditions
8. Business etiquette (if applicable)

Format as JSON with categories and tips.
"""
        return generate_json(
            prompt,
            lambda: {k: list(v) for k, v in FALLBACK_CULTURAL_TIPS.items()},
            label="cultural_tips",
        )


multilingual_service = MultilingualService()
