"""
api/routes/sustainability.py
----------------------------
All POST, body {"itinerary": {...}}:

    /api/sustainability/carbon-footprint
    /api/sustainability/local-impact
    /api/sustainability/report
    /api/sustainability/alternatives
    /api/sustainability/progress      body also carries userId
"""
from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, Field

from trip_planner.modules.sustainability.service import sustainability_service

router = APIRouter()


class ItineraryBody(BaseModel):
    itinerary: dict = Field(default_factory=dict)


class ProgressBody(ItineraryBody):
    userId: str


@router.post("/carbon-footprint", summary="Carbon footprint of a trip")
def carbon_footprint(body: ItineraryBody) -> dict:
    return {
        "success": True,
        "carbonFootprint": sustainability_service.calculate_carbon_footprint(body.itinerary),
        "message": "Carbon footprint calculated successfully!",
    }


@router.post("/local-impact", summary="Local economic and cultural impact")
def local_impact(body: ItineraryBody) -> dict:
    return {
        "success": True,
        "localImpact": sustainability_service.calculate_local_impact(body.itinerary),
        "message": "Local impact calculated successfully!",
    }


@router.post("/report", summary="Full sustainability report")
def report(body: ItineraryBody) -> dict:
    return {
        "success": True,
        "report": sustainability_service.generate_sustainability_report(body.itinerary),
        "message": "Sustainability report generated successfully!",
    }


@router.post("/alternatives", summary="Eco-friendly alternatives")
def alternatives(body: ItineraryBody) -> dict:
    return {
        "success": True,
        "alternatives": sustainability_service.get_eco_friendly_alternatives(body.itinerary),
        "message": "Eco-friendly alternatives generated successfully!",
    }


@router.post("/progress", summary="Sustainability progress and achievements")
def progress(body: ProgressBody) -> dict:
    return {"success": True, "progress": sustainability_service.track_progress(body.userId, body.itinerary)}
