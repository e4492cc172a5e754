"""
api/routes/maps.py
------------------
Google Maps / OpenWeatherMap lookups.

    GET  /api/maps/places/{destination}?type=
    GET  /api/maps/attractions/{destination}
    GET  /api/maps/restaurants/{destination}?cuisine=
    GET  /api/maps/directions?origin&destination&mode
    GET  /api/maps/destination/{name}
    GET  /api/maps/weather?destination&date
    GET  /api/maps/search?query&location&radius&type
    GET  /api/maps/place/{place_id}
    POST /api/maps/route
    GET  /api/maps/nearby?location&radius&type&keyword

Google answering with a non-OK status is a client-side problem (bad query,
zero results), so UpstreamError from the service becomes 400 here.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from trip_planner.errors import UpstreamError
from trip_planner.modules.tool_usage.maps_tool import maps_service
from trip_planner.modules.tool_usage.weather_tool import weather_tool

router = APIRouter()


class RouteRequest(BaseModel):
    origin: Optional[str] = None
    destination: Optional[str] = None
    waypoints: Optional[list[str]] = None
    mode: str = "driving"


def _bad_status(exc: UpstreamError) -> HTTPException:
    status = exc.details.get("status")
    return HTTPException(status_code=400, detail=f"{exc.message}: {status}" if status else exc.message)


@router.get("/places/{destination}", summary="Places of a type in a city")
def places(destination: str, type: str = "tourist_attraction") -> dict:
    results = maps_service.get_places_by_type(destination, type)
    return {"success": True, "places": results, "total": len(results)}


@router.get("/attractions/{destination}", summary="Attractions, museums, parks, religious sites")
def attractions(destination: str) -> dict:
    return {"success": True, "attractions": maps_service.get_tourist_attractions(destination)}


@router.get("/restaurants/{destination}", summary="Restaurants, optionally by cuisine")
def restaurants(destination: str, cuisine: Optional[str] = None) -> dict:
    results = maps_service.get_restaurants(destination, cuisine)
    return {"success": True, "restaurants": results, "total": len(results)}


@router.get("/directions", summary="Directions between two places")
def directions(origin: str, destination: str, mode: str = "driving") -> dict:
    route = maps_service.get_directions(origin, destination, mode)
    if route is None:
        raise HTTPException(status_code=404, detail="No route found")
    return {"success": True, "directions": route}


@router.get("/destination/{name}", summary="Destination summary and details")
def destination(name: str) -> dict:
    return {"success": True, "destination": maps_service.destination_info(name)}


@router.get("/weather", summary="Current weather and 24h forecast")
def weather(destination: Optional[str] = None, date: Optional[str] = None) -> dict:
    if not destination:
        raise HTTPException(status_code=400, detail="Destination is required")
    return {"success": True, "weather": weather_tool.get_weather(destination)}


@router.get("/search", summary="Text search for places")
def search(
    query: Optional[str] = None,
    location: Optional[str] = None,
    radius: int = 5000,
    type: Optional[str] = None,
) -> dict:
    if not query:
        raise HTTPException(status_code=400, detail="Query is required")
    try:
        results = maps_service.text_search(query, location, radius, type)
    except UpstreamError as exc:
        raise _bad_status(exc) from exc
    return {"success": True, "places": results, "total": len(results)}


@router.get("/place/{place_id}", summary="Place details")
def place(place_id: str) -> dict:
    return {"success": True, "place": maps_service.place(place_id)}


@router.post("/route", summary="Route with optional waypoints")
def route(req: RouteRequest) -> dict:
    if not req.origin or not req.destination:
        raise HTTPException(status_code=400, detail="Origin and destination are required")
    try:
        info = maps_service.route(req.origin, req.destination, req.mode, req.waypoints)
    except UpstreamError as exc:
        raise _bad_status(exc) from exc
    return {"success": True, "route": info}


@router.get("/nearby", summary="Nearby places of a type")
def nearby(
    location: Optional[str] = None,
    type: Optional[str] = None,
    radius: int = 5000,
    keyword: Optional[str] = None,
) -> dict:
    if not location or not type:
        raise HTTPException(status_code=400, detail="Location and type are required")
    try:
        results = maps_service.nearby(location, type, radius, keyword)
    except UpstreamError as exc:
        raise _bad_status(exc) from exc
    return {"success": True, "places": results, "total": len(results)}
