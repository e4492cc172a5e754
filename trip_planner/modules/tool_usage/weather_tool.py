"""
modules/tool_usage/weather_tool.py
-----------------------------------
Destination weather backed by OpenWeatherMap 5-day/3-hour Forecast API.

Flow:
    1. Google Geocoding: destination name -> lat/lng
    2. GET {OPENWEATHER_BASE_URL}/forecast?lat=..&lon=..&appid=..&units=metric
    3. First list entry = "current", first 8 entries = next 24 hours

OWM condition code -> internal condition string
───────────────────────────────────────────────
  2xx  Thunderstorm       → "thunderstorm"
  3xx  Drizzle            → "drizzle"
  5xx  Rain               → "rainy" / "heavy_rain"
  6xx  Snow               → "snow"
  7xx  Atmosphere         → "foggy"
  800  Clear              → "clear"
  80x  Clouds             → "cloudy"
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from trip_planner import config
from trip_planner.errors import NotFoundError
from trip_planner.modules.tool_usage.maps_tool import maps_get

logger = logging.getLogger(__name__)

# 8 × 3h slots = next 24 hours
FORECAST_SLOTS = 8

# Substrings of a condition that push outdoor plans indoors ("Rain", "heavy_rain", "Thunderstorm")
ADVERSE_KEYWORDS = ("rain", "drizzle", "storm", "thunder", "snow")


def owm_code_to_condition(code: int) -> str:
    if 200 <= code < 300:
        return "thunderstorm"
    if 300 <= code < 400:
        return "drizzle"
    if code in (502, 503, 504, 511):
        return "heavy_rain"
    if 500 <= code < 600:
        return "rainy"
    if 600 <= code < 700:
        return "snow"
    if 700 <= code < 800:
        return "foggy"
    if code == 800:
        return "clear"
    return "cloudy"


def condition_of(entry: Any) -> str:
    """
    Internal condition for one forecast entry: an OWM list item, a simplified
    `{"condition": ...}` dict or a bare string such as "Rain". Anything else
    counts as clear.
    """
    if isinstance(entry, str):
        return entry.strip().lower() or "clear"
    if not entry or not isinstance(entry, dict):
        return "clear"
    if isinstance(entry.get("condition"), str):
        return entry["condition"].strip().lower() or "clear"
    weather = entry.get("weather")
    if isinstance(weather, list) and weather and isinstance(weather[0], dict) and isinstance(weather[0].get("id"), int):
        return owm_code_to_condition(weather[0]["id"])
    return "clear"


def is_adverse(condition: str) -> bool:
    return any(k in condition for k in ADVERSE_KEYWORDS)


def _forecast(lat: float, lon: float) -> dict:
    resp = requests.get(
        f"{config.OPENWEATHER_BASE_URL.rstrip('/')}/forecast",
        params={"lat": lat, "lon": lon, "appid": config.OPENWEATHER_API_KEY, "units": "metric"},
        timeout=config.MAPS_REQUEST_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


class WeatherTool:

    def get_weather(self, destination: str) -> dict:
        geocoded = maps_get("geocode/json", {"address": destination})
        if geocoded.get("status") != "OK" or not geocoded.get("results"):
            raise NotFoundError("Destination not found")

        location = geocoded["results"][0]["geometry"]["location"]
        data = _forecast(location["lat"], location["lng"])
        entries = data.get("list") or []
        logger.debug("Fetched %d forecast entries for %s", len(entries), destination)

        return {
            "location": {"name": destination, "coordinates": location},
            "current": entries[0] if entries else None,
            "forecast": entries[:FORECAST_SLOTS],
            "city": data.get("city"),
        }


weather_tool = WeatherTool()
