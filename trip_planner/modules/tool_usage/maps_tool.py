"""
modules/tool_usage/maps_tool.py
--------------------------------
Google Maps Platform web-service client (Places, Directions, Distance
Matrix, Geocoding, Elevation, Time Zone).

Base URL: GOOGLE_MAPS_BASE_URL (default https://maps.googleapis.com/maps/api)
Auth:     `key` query parameter (GOOGLE_MAPS_API_KEY)

Two layers:
  - thin lookups (get_place_details, search_places, ...) that log and return
    None / [] / {} on any failure, used by the composite helpers;
  - API-facing lookups (destination_info, text_search, ...) that check the
    Google `status` field and raise NotFoundError / UpstreamError so the
    routes can answer 404 / 400.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from trip_planner import config
from trip_planner.errors import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)

_DETAILS_FIELDS = "name,formatted_address,geometry,rating,photos,reviews,opening_hours,types,price_level"
_FULL_DETAILS_FIELDS = (
    "name,formatted_address,geometry,rating,photos,reviews,opening_hours,"
    "website,formatted_phone_number,price_level,types"
)
_SEARCH_FIELDS = "place_id,name,formatted_address,geometry,rating,photos,types"

# City-wide nearby search radius (metres)
CITY_RADIUS_M = 50000

TRANSPORT_MODES = ("driving", "transit", "walking", "bicycling")


def maps_get(path: str, params: dict) -> dict:
    url = f"{config.GOOGLE_MAPS_BASE_URL.rstrip('/')}/{path.lstrip('/')}"
    resp = requests.get(
        url,
        params={**{k: v for k, v in params.items() if v is not None}, "key": config.GOOGLE_MAPS_API_KEY},
        timeout=config.MAPS_REQUEST_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


def photo_url(reference: str, max_width: int = 400) -> str:
    return (
        f"{config.GOOGLE_MAPS_BASE_URL.rstrip('/')}/place/photo"
        f"?maxwidth={max_width}&photoreference={reference}&key={config.GOOGLE_MAPS_API_KEY}"
    )


def _photos(place: dict) -> list[dict] | None:
    if not place.get("photos"):
        return None
    return [
        {"photoReference": p.get("photo_reference"), "url": photo_url(p.get("photo_reference", ""))}
        for p in place["photos"]
    ]


def _latlng(location: dict) -> str:
    return f"{location['lat']},{location['lng']}"


def calculate_traffic_level(leg: dict) -> str:
    """Delay in traffic vs. free-flow: >50% heavy, >20% moderate, else light."""
    if not leg.get("duration_in_traffic"):
        return "normal"
    normal = leg["duration"]["value"]
    in_traffic = leg["duration_in_traffic"]["value"]
    if not normal:
        return "normal"
    difference = (in_traffic - normal) / normal * 100
    if difference > 50:
        return "heavy"
    if difference > 20:
        return "moderate"
    return "light"


class MapsService:

    # ── thin lookups ──────────────────────────────────────────────────────

    def get_place_details(self, place_id: str) -> dict | None:
        try:
            return maps_get("place/details/json", {"place_id": place_id, "fields": _DETAILS_FIELDS}).get("result")
        except Exception as exc:
            logger.error("Error fetching place details %s: %s", place_id, exc)
            return None

    def search_places(self, query: str, location: str | None = None, radius: int = 5000) -> list[dict]:
        params: dict[str, Any] = {"query": query}
        if location:
            params["location"] = location
            params["radius"] = radius
        try:
            return maps_get("place/textsearch/json", params).get("results") or []
        except Exception as exc:
            logger.error("Error searching places for %r: %s", query, exc)
            return []

    def get_nearby_places(self, location: str, place_type: str, radius: int = 1000) -> list[dict]:
        try:
            return maps_get("place/nearbysearch/json", {
                "location": location, "radius": radius, "type": place_type,
            }).get("results") or []
        except Exception as exc:
            logger.error("Error fetching nearby %s places: %s", place_type, exc)
            return []

    def get_directions(self, origin: str, destination: str, mode: str = "driving") -> dict | None:
        try:
            routes = maps_get("directions/json", {
                "origin": origin, "destination": destination, "mode": mode,
            }).get("routes") or []
            return routes[0] if routes else None
        except Exception as exc:
            logger.error("Error getting %s directions: %s", mode, exc)
            return None

    def get_distance_matrix(
        self,
        origins: str | list[str],
        destinations: str | list[str],
        mode: str = "driving",
    ) -> dict | None:
        try:
            return maps_get("distancematrix/json", {
                "origins": "|".join(origins) if isinstance(origins, list) else origins,
                "destinations": "|".join(destinations) if isinstance(destinations, list) else destinations,
                "mode": mode,
            })
        except Exception as exc:
            logger.error("Error getting distance matrix: %s", exc)
            return None

    def geocode(self, address: str) -> dict | None:
        try:
            results = maps_get("geocode/json", {"address": address}).get("results") or []
            return results[0] if results else None
        except Exception as exc:
            logger.error("Error geocoding %r: %s", address, exc)
            return None

    def reverse_geocode(self, lat: float, lng: float) -> dict | None:
        try:
            results = maps_get("geocode/json", {"latlng": f"{lat},{lng}"}).get("results") or []
            return results[0] if results else None
        except Exception as exc:
            logger.error("Error reverse geocoding (%s, %s): %s", lat, lng, exc)
            return None

    # ── composite helpers ─────────────────────────────────────────────────

    def get_places_by_type(self, city: str, place_type: str) -> list[dict]:
        geocoded = self.geocode(city)
        if not geocoded:
            return []
        location = geocoded["geometry"]["location"]
        return self.get_nearby_places(_latlng(location), place_type, CITY_RADIUS_M)

    def get_tourist_attractions(self, city: str) -> dict:
        return {
            "attractions": self.get_places_by_type(city, "tourist_attraction")[:10],
            "museums": self.get_places_by_type(city, "museum")[:5],
            "parks": self.get_places_by_type(city, "park")[:5],
            "religiousSites": self.get_places_by_type(city, "place_of_worship")[:5],
        }

    def get_restaurants(self, city: str, cuisine: str | None = None) -> list[dict]:
        restaurants = self.get_places_by_type(city, "restaurant")
        if cuisine:
            restaurants = [r for r in restaurants if cuisine.lower() in (r.get("types") or [])]
        return restaurants[:20]

    def get_accommodations(self, city: str) -> list[dict]:
        return self.get_places_by_type(city, "lodging")[:15]

    def get_transportation_options(self, origin: str, destination: str) -> dict:
        options: dict[str, dict] = {}
        for mode in TRANSPORT_MODES:
            directions = self.get_directions(origin, destination, mode)
            if not directions or not directions.get("legs"):
                continue
            leg = directions["legs"][0]
            options[mode] = {
                "duration": leg["duration"]["text"],
                "distance": leg["distance"]["text"],
                "steps": [
                    {
                        "instruction": step.get("html_instructions"),
                        "duration": step["duration"]["text"],
                        "distance": step["distance"]["text"],
                    }
                    for step in leg.get("steps") or []
                ],
            }
        return options

    def get_traffic_data(self, origin: str, destination: str) -> dict | None:
        directions = self.get_directions(origin, destination, "driving")
        if not directions or not directions.get("legs"):
            return None
        leg = directions["legs"][0]
        return {
            "duration": leg["duration"]["text"],
            "durationInTraffic": (leg.get("duration_in_traffic") or leg["duration"])["text"],
            "distance": leg["distance"]["text"],
            "trafficLevel": calculate_traffic_level(leg),
        }

    def get_place_photos(self, place_id: str, max_photos: int = 5) -> list[dict]:
        details = self.get_place_details(place_id)
        if not details or not details.get("photos"):
            return []
        return [
            {
                "photo_reference": p.get("photo_reference"),
                "height": p.get("height"),
                "width": p.get("width"),
                "url": photo_url(p.get("photo_reference", "")),
            }
            for p in details["photos"][:max_photos]
        ]

    def get_optimized_route(self, origin: str, destinations: list[str]) -> dict | None:
        """Directions through every stop; the last entry is the final destination."""
        if not destinations:
            return None
        waypoints = destinations[:-1]
        try:
            routes = maps_get("directions/json", {
                "origin": origin,
                "destination": destinations[-1],
                "waypoints": ("optimize:true|" + "|".join(waypoints)) if waypoints else None,
            }).get("routes") or []
            return routes[0] if routes else None
        except Exception as exc:
            logger.error("Error getting optimized route: %s", exc)
            return None

    def get_elevation_data(self, locations: dict | list[dict]) -> list[dict]:
        if isinstance(locations, list):
            location_str = "|".join(_latlng(loc) for loc in locations)
        else:
            location_str = _latlng(locations)
        try:
            return maps_get("elevation/json", {"locations": location_str}).get("results") or []
        except Exception as exc:
            logger.error("Error getting elevation data: %s", exc)
            return []

    def get_timezone_data(self, location: dict, timestamp: int | None = None) -> dict | None:
        try:
            return maps_get("timezone/json", {"location": _latlng(location), "timestamp": timestamp})
        except Exception as exc:
            logger.error("Error getting timezone data: %s", exc)
            return None

    # ── API-facing lookups (raise on non-OK status) ───────────────────────

    def destination_info(self, name: str) -> dict:
        data = maps_get("place/textsearch/json", {"query": name, "fields": _SEARCH_FIELDS})
        if data.get("status") != "OK" or not data.get("results"):
            raise NotFoundError("Destination not found", details={"status": data.get("status")})
        place = data["results"][0]
        details = maps_get("place/details/json", {
            "place_id": place["place_id"],
            "fields": "name,formatted_address,geometry,rating,photos,reviews,opening_hours,website,formatted_phone_number",
        })
        return {
            "placeId": place.get("place_id"),
            "name": place.get("name"),
            "address": place.get("formatted_address"),
            "location": (place.get("geometry") or {}).get("location"),
            "rating": place.get("rating"),
            "photos": _photos(place),
            "types": place.get("types"),
            "details": details.get("result"),
        }

    def text_search(
        self,
        query: str,
        location: str | None = None,
        radius: int = 5000,
        place_type: str | None = None,
    ) -> list[dict]:
        params: dict[str, Any] = {"query": query, "fields": _SEARCH_FIELDS, "type": place_type}
        if location:
            params["location"] = location
            params["radius"] = radius
        data = maps_get("place/textsearch/json", params)
        if data.get("status") != "OK":
            raise UpstreamError("Search failed", details={"status": data.get("status")})
        return [
            {
                "placeId": p.get("place_id"),
                "name": p.get("name"),
                "address": p.get("formatted_address"),
                "location": (p.get("geometry") or {}).get("location"),
                "rating": p.get("rating"),
                "photos": _photos(p),
                "types": p.get("types"),
            }
            for p in data.get("results") or []
        ]

    def place(self, place_id: str) -> dict:
        data = maps_get("place/details/json", {"place_id": place_id, "fields": _FULL_DETAILS_FIELDS})
        if data.get("status") != "OK":
            raise NotFoundError("Place not found", details={"status": data.get("status")})
        p = data.get("result") or {}
        return {
            "placeId": p.get("place_id", place_id),
            "name": p.get("name"),
            "address": p.get("formatted_address"),
            "location": (p.get("geometry") or {}).get("location"),
            "rating": p.get("rating"),
            "priceLevel": p.get("price_level"),
            "photos": _photos(p),
            "reviews": p.get("reviews"),
            "openingHours": p.get("opening_hours"),
            "website": p.get("website"),
            "phone": p.get("formatted_phone_number"),
            "types": p.get("types"),
        }

    def route(
        self,
        origin: str,
        destination: str,
        mode: str = "driving",
        waypoints: list[str] | None = None,
    ) -> dict:
        data = maps_get("directions/json", {
            "origin": origin,
            "destination": destination,
            "mode": mode,
            "waypoints": "|".join(waypoints) if waypoints else None,
        })
        if data.get("status") != "OK" or not data.get("routes"):
            raise UpstreamError("Route calculation failed", details={"status": data.get("status")})
        route = data["routes"][0]
        leg = route["legs"][0]
        return {
            "distance": leg.get("distance"),
            "duration": leg.get("duration"),
            "startAddress": leg.get("start_address"),
            "endAddress": leg.get("end_address"),
            "steps": [
                {
                    "instruction": s.get("html_instructions"),
                    "distance": s.get("distance"),
                    "duration": s.get("duration"),
                    "startLocation": s.get("start_location"),
                    "endLocation": s.get("end_location"),
                }
                for s in leg.get("steps") or []
            ],
            "overviewPolyline": (route.get("overview_polyline") or {}).get("points"),
        }

    def nearby(
        self,
        location: str,
        place_type: str,
        radius: int = 5000,
        keyword: str | None = None,
    ) -> list[dict]:
        data = maps_get("place/nearbysearch/json", {
            "location": location, "radius": radius, "type": place_type, "keyword": keyword,
        })
        if data.get("status") != "OK":
            raise UpstreamError("Nearby search failed", details={"status": data.get("status")})
        return [
            {
                "placeId": p.get("place_id"),
                "name": p.get("name"),
                "address": p.get("vicinity"),
                "location": (p.get("geometry") or {}).get("location"),
                "rating": p.get("rating"),
                "priceLevel": p.get("price_level"),
                "photos": _photos(p),
                "types": p.get("types"),
                "openingHours": p.get("opening_hours"),
            }
            for p in data.get("results") or []
        ]


maps_service = MapsService()
