"""
api/routes/ai.py
----------------
LLM-backed planning endpoints.

    POST /api/ai/generate-itinerary     (auth optional; anonymous = demo-user)
    POST /api/ai/recommendations
    POST /api/ai/analyze-preferences    (auth)
    POST /api/ai/adjust-itinerary       (auth)
    POST /api/ai/weather-adjustments
    POST /api/social/templates          (mounted separately under /api/social)
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from trip_planner.api.deps import DEMO_USER_ID, optional_user, require_user
from trip_planner.auth import AuthUser
from trip_planner.modules.planning.itinerary_service import itinerary_service

router = APIRouter()
social_router = APIRouter()


# ── Request schemas ────────────────────────────────────────────────────────────

class GenerateItineraryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[str] = Field(None, alias="from")
    destination: Optional[str] = None
    duration: Optional[int] = None
    budget: Optional[float] = None
    interests: Optional[list[str]] = None
    travelStyle: Optional[str] = None
    groupSize: Optional[int] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    specialRequirements: Optional[list[str]] = None


class RecommendationsRequest(BaseModel):
    destination: Optional[str] = None
    currentLocation: Optional[Any] = None
    interests: list[str] = Field(default_factory=list)
    budget: float = 0
    timeOfDay: str = "any"
    weather: str = "clear"


class AnalyzePreferencesRequest(BaseModel):
    tripHistory: list[dict] = Field(default_factory=list)
    feedback: list[Any] = Field(default_factory=list)
    preferences: dict = Field(default_factory=dict)


class AdjustItineraryRequest(BaseModel):
    itineraryId: str
    adjustments: Optional[Any] = None
    reason: Optional[str] = None
    currentLocation: Optional[Any] = None
    weather: Optional[Any] = None
    timeConstraints: Optional[Any] = None


class WeatherAdjustmentsRequest(BaseModel):
    itinerary: dict
    weatherData: Optional[Any] = None


class SocialTemplatesRequest(BaseModel):
    itinerary: dict
    platform: Optional[str] = None


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.post("/generate-itinerary", summary="Generate a day-by-day itinerary")
def generate_itinerary(
    req: GenerateItineraryRequest,
    user: Optional[AuthUser] = Depends(optional_user),
) -> dict:
    params = req.model_dump(by_alias=True, exclude_none=True)
    if not all(params.get(k) for k in ("from", "destination", "duration", "budget", "interests")):
        raise HTTPException(status_code=400, detail="Missing required itinerary parameters")

    params["userId"] = user.id if user else DEMO_USER_ID
    itinerary = itinerary_service.generate_itinerary(params)
    return {"success": True, "itinerary": itinerary, "message": "Itinerary generated successfully"}


@router.post("/recommendations", summary="Personalised recommendations")
def recommendations(
    req: RecommendationsRequest,
    user: Optional[AuthUser] = Depends(optional_user),
) -> dict:
    params = {**req.model_dump(), "userId": user.id if user else DEMO_USER_ID}
    return {
        "success": True,
        "recommendations": itinerary_service.get_personalized_recommendations(params),
        "message": "Recommendations generated successfully",
    }


@router.post("/analyze-preferences", summary="Analyse a user's travel preferences")
def analyze_preferences(req: AnalyzePreferencesRequest, user: AuthUser = Depends(require_user)) -> dict:
    analysis = itinerary_service.analyze_user_preferences({**req.model_dump(), "userId": user.id})
    return {"success": True, "analysis": analysis, "message": "Preferences analyzed successfully"}


@router.post("/adjust-itinerary", summary="Apply real-time adjustments to an itinerary")
def adjust_itinerary(req: AdjustItineraryRequest, user: AuthUser = Depends(require_user)) -> dict:
    adjusted = itinerary_service.adjust_itinerary({**req.model_dump(), "userId": user.id})
    return {"success": True, "itinerary": adjusted, "message": "Itinerary adjusted successfully"}


@router.post("/weather-adjustments", summary="Suggest weather-driven changes")
def weather_adjustments(req: WeatherAdjustmentsRequest) -> dict:
    adjustments = itinerary_service.generate_weather_adjustments(req.itinerary, req.weatherData)
    return {"success": True, "adjustments": adjustments, "message": "Weather adjustments generated"}


@social_router.post("/templates", summary="Social media post templates for a trip")
def social_templates(req: SocialTemplatesRequest) -> dict:
    templates = itinerary_service.generate_social_templates(req.itinerary, req.platform)
    return {"success": True, "templates": templates, "message": "Social templates generated"}
