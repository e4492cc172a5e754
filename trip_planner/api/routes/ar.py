"""
api/routes/ar.py
----------------
    POST /api/ar/content
    POST /api/ar/experiences
    GET  /api/ar/landmarks/{destination}
    POST /api/ar/navigation
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from trip_planner.modules.assistant.ar_content import ar_service

router = APIRouter()


class ARContentRequest(BaseModel):
    landmark: str
    destination: str


class ARExperiencesRequest(BaseModel):
    itinerary: dict = Field(default_factory=dict)
    userInterests: Optional[list[str]] = None


class ARNavigationRequest(BaseModel):
    origin: str
    destination: str
    landmarks: Optional[list[str]] = None


@router.post("/content", summary="AR overlay content for a landmark")
def content(req: ARContentRequest) -> dict:
    return {
        "success": True,
        "arContent": ar_service.generate_ar_content(req.landmark, req.destination),
        "message": "AR content generated successfully!",
    }


@router.post("/experiences", summary="AR experiences for an itinerary")
def experiences(req: ARExperiencesRequest) -> dict:
    return {
        "success": True,
        "arExperiences": ar_service.generate_ar_experiences(req.itinerary, req.userInterests),
        "message": "AR experiences generated successfully!",
    }


@router.get("/landmarks/{destination}", summary="AR-enabled landmarks in a city")
def landmarks(destination: str) -> dict:
    return {
        "success": True,
        "landmarks": ar_service.get_ar_landmarks(destination),
        "categories": ar_service.get_ar_experience_categories(),
        "accessibility": ar_service.get_ar_accessibility_features(),
    }


@router.post("/navigation", summary="AR walking navigation")
def navigation(req: ARNavigationRequest) -> dict:
    return {
        "success": True,
        "navigation": ar_service.generate_ar_navigation(req.origin, req.destination, req.landmarks),
    }
