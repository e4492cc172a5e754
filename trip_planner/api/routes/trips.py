"""
api/routes/trips.py
-------------------
Saved-itinerary CRUD. Every route except popular-destinations requires auth
and checks that the caller owns the itinerary (404 missing, 403 otherwise).

    GET    /api/trips/history
    GET    /api/trips/popular-destinations
    GET    /api/trips/{id}
    POST   /api/trips/save
    PUT    /api/trips/{id}
    DELETE /api/trips/{id}
    POST   /api/trips/{id}/share
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from trip_planner.api.deps import require_user
from trip_planner.auth import AuthUser
from trip_planner.db import get_store, now_iso
from trip_planner.modules.planning.itinerary_service import POPULAR_DESTINATIONS

router = APIRouter()

# Fields a client may not overwrite through save / update
_PROTECTED = ("id", "userId", "createdAt")


class ShareRequest(BaseModel):
    shareWith: Optional[Any] = None
    permissions: Optional[list[str]] = None


def _owned_itinerary(itinerary_id: str, user: AuthUser) -> dict:
    doc = get_store().get("itineraries", itinerary_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Itinerary not found")
    if doc.get("userId") != user.id:
        raise HTTPException(status_code=403, detail="Unauthorized access")
    return doc


@router.get("/history", summary="Caller's itineraries, newest first")
def trip_history(user: AuthUser = Depends(require_user)) -> dict:
    trips = get_store().query("itineraries", {"userId": user.id}, order_by="createdAt", descending=True)
    return {"success": True, "trips": trips}


# Registered before /{itinerary_id} so the literal path wins
@router.get("/popular-destinations", summary="Popular destinations")
def popular_destinations() -> dict:
    return {"success": True, "destinations": POPULAR_DESTINATIONS}


@router.get("/{itinerary_id}", summary="Get one itinerary")
def get_itinerary(itinerary_id: str, user: AuthUser = Depends(require_user)) -> dict:
    return {"success": True, "itinerary": _owned_itinerary(itinerary_id, user)}


@router.post("/save", summary="Save an itinerary")
def save_itinerary(body: dict = Body(...), user: AuthUser = Depends(require_user)) -> dict:
    timestamp = now_iso()
    data = {k: v for k, v in body.items() if k not in _PROTECTED}
    itinerary_id = get_store().add("itineraries", {
        **data,
        "userId": user.id,
        "createdAt": timestamp,
        "updatedAt": timestamp,
    })
    return {"success": True, "itineraryId": itinerary_id, "message": "Itinerary saved successfully"}


@router.put("/{itinerary_id}", summary="Update an itinerary")
def update_itinerary(itinerary_id: str, body: dict = Body(...), user: AuthUser = Depends(require_user)) -> dict:
    _owned_itinerary(itinerary_id, user)
    fields = {k: v for k, v in body.items() if k not in _PROTECTED}
    get_store().update("itineraries", itinerary_id, {**fields, "updatedAt": now_iso()})
    return {"success": True, "message": "Itinerary updated successfully"}


@router.delete("/{itinerary_id}", summary="Delete an itinerary")
def delete_itinerary(itinerary_id: str, user: AuthUser = Depends(require_user)) -> dict:
    _owned_itinerary(itinerary_id, user)
    get_store().delete("itineraries", itinerary_id)
    return {"success": True, "message": "Itinerary deleted successfully"}


@router.post("/{itinerary_id}/share", summary="Share an itinerary")
def share_itinerary(itinerary_id: str, req: ShareRequest, user: AuthUser = Depends(require_user)) -> dict:
    _owned_itinerary(itinerary_id, user)
    share_id = get_store().add("shares", {
        "itineraryId": itinerary_id,
        "sharedBy": user.id,
        "sharedWith": req.shareWith,
        "permissions": req.permissions or ["read"],
        "createdAt": now_iso(),
    })
    return {"success": True, "shareId": share_id, "message": "Itinerary shared successfully"}
