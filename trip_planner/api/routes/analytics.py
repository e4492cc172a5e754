"""
api/routes/analytics.py
-----------------------
    GET  /api/analytics/insights/{userId}
    GET  /api/analytics/dashboard/{userId}
    POST /api/analytics/track-recommendation
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from trip_planner.modules.analytics.insights import TRACKED_ACTIONS, analytics_service

router = APIRouter()


class TrackRecommendationRequest(BaseModel):
    userId: str
    recommendationId: str
    action: str


@router.get("/insights/{user_id}", summary="Travel insights for a user")
def insights(user_id: str) -> dict:
    return {
        "success": True,
        "insights": analytics_service.generate_user_insights(user_id),
        "message": "User insights generated successfully!",
    }


@router.get("/dashboard/{user_id}", summary="Analytics dashboard for a user")
def dashboard(user_id: str) -> dict:
    return {
        "success": True,
        "dashboard": analytics_service.get_analytics_dashboard(user_id),
        "message": "Analytics dashboard retrieved successfully!",
    }


@router.post("/track-recommendation", summary="Record what a user did with a recommendation")
def track_recommendation(req: TrackRecommendationRequest) -> dict:
    if req.action not in TRACKED_ACTIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid action. Must be one of: {', '.join(TRACKED_ACTIONS)}",
        )
    result = analytics_service.track_recommendation_effectiveness(req.userId, req.recommendationId, req.action)
    return {"success": True, "result": result, "message": "Recommendation tracking recorded successfully!"}
