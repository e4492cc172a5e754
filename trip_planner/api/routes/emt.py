"""
api/routes/emt.py
-----------------
EaseMyTrip inventory passthrough.

    POST /api/emt/search
    GET  /api/emt/item/{itemId}?category=
    POST /api/emt/availability
    POST /api/emt/book
    POST /api/emt/book-itinerary
    GET  /api/emt/booking/{bookingId}
    POST /api/emt/booking/{bookingId}/cancel
    GET  /api/emt/categories
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, HTTPException
from pydantic import BaseModel, Field

from trip_planner.modules.tool_usage.emt_tool import emt_service

router = APIRouter()


class AvailabilityRequest(BaseModel):
    itemId: str
    category: str
    startDate: str
    endDate: Optional[str] = None
    passengers: int = 1


class BookItineraryRequest(BaseModel):
    itinerary: dict = Field(default_factory=dict)
    customerInfo: dict = Field(default_factory=dict)
    paymentInfo: dict = Field(default_factory=dict)


class CancelRequest(BaseModel):
    reason: str = "User requested cancellation"


@router.post("/search", summary="Search inventory")
def search(params: dict = Body(...)) -> dict:
    return {
        "success": True,
        "results": emt_service.search_inventory(params),
        "message": "EMT inventory search completed successfully!",
    }


@router.get("/item/{item_id}", summary="Inventory item details")
def item(item_id: str, category: Optional[str] = None) -> dict:
    return {
        "success": True,
        "details": emt_service.get_item_details(item_id, category),
        "message": "Item details retrieved successfully!",
    }


@router.post("/availability", summary="Check availability")
def availability(req: AvailabilityRequest) -> dict:
    result = emt_service.check_availability(req.itemId, req.category, req.startDate, req.endDate, req.passengers)
    return {"success": True, "availability": result, "message": "Availability checked successfully!"}


@router.post("/book", summary="Book one inventory item")
def book(booking: dict = Body(...)) -> dict:
    validation = emt_service.validate_booking_data(booking)
    if not validation["valid"]:
        raise HTTPException(status_code=400, detail="; ".join(validation["errors"]))
    return {
        "success": True,
        "booking": emt_service.create_booking(booking),
        "message": "Booking created successfully!",
    }


@router.post("/book-itinerary", summary="Book every bookable item of an itinerary")
def book_itinerary(req: BookItineraryRequest) -> dict:
    result = emt_service.book_complete_itinerary(req.itinerary, req.customerInfo, req.paymentInfo)
    return {"success": True, "result": result, "message": "Complete itinerary booking processed successfully!"}


@router.get("/booking/{booking_id}", summary="Booking status")
def booking_status(booking_id: str) -> dict:
    return {
        "success": True,
        "booking": emt_service.get_booking_status(booking_id),
        "message": "Booking status retrieved successfully!",
    }


@router.post("/booking/{booking_id}/cancel", summary="Cancel a booking")
def cancel(booking_id: str, req: CancelRequest) -> dict:
    return {
        "success": True,
        "result": emt_service.cancel_booking(booking_id, req.reason),
        "message": "Booking cancelled successfully!",
    }


@router.get("/categories", summary="Service categories")
def categories() -> dict:
    return {
        "success": True,
        "categories": emt_service.get_service_categories(),
        "message": "Service categories retrieved successfully!",
    }
