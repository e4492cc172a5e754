"""
api/routes/booking.py
---------------------
Itinerary booking (all routes require auth).

    POST /api/booking/book              pay first, then book
    POST /api/booking/create            book against an existing paymentId
    GET  /api/booking/status/{id}
    POST /api/booking/cancel/{id}
    POST /api/booking/{id}/cancel
    GET  /api/booking/my-bookings
    GET  /api/booking/{id}
    GET  /api/bookings                  (bookings_router, mounted at /api)
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from trip_planner.api.deps import require_user
from trip_planner.auth import AuthUser
from trip_planner.modules.booking.booking_manager import booking_manager
from trip_planner.modules.payment.payment_gateway import payment_gateway

router = APIRouter()
bookings_router = APIRouter()


class BookRequest(BaseModel):
    itineraryId: Optional[str] = None
    paymentMethod: Optional[str] = None
    paymentDetails: Optional[dict] = None
    contactInfo: Optional[dict] = None
    specialRequests: list[Any] = Field(default_factory=list)


class CreateBookingRequest(BaseModel):
    itineraryId: str
    travelerDetails: Optional[dict] = None
    paymentDetails: dict = Field(default_factory=dict)
    specialRequests: list[Any] = Field(default_factory=list)


class CancelRequest(BaseModel):
    reason: Optional[str] = None


@router.post("/book", summary="Pay for and book an itinerary")
def book(req: BookRequest, user: AuthUser = Depends(require_user)) -> dict:
    if not req.itineraryId or not req.paymentMethod or not req.paymentDetails:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: itineraryId, paymentMethod, paymentDetails",
        )

    payment = payment_gateway.process_payment({
        "userId": user.id,
        "amount": req.paymentDetails.get("amount"),
        "currency": req.paymentDetails.get("currency") or "USD",
        "paymentMethod": req.paymentMethod,
        "paymentDetails": req.paymentDetails,
    })
    if not payment["success"]:
        raise HTTPException(status_code=400, detail=f"Payment failed: {payment['message']}")

    booking = booking_manager.book_itinerary({
        "userId": user.id,
        "itineraryId": req.itineraryId,
        "paymentId": payment["paymentId"],
        "contactInfo": req.contactInfo,
        "specialRequests": req.specialRequests,
    })
    return {"success": True, "booking": booking, "payment": payment, "message": "Booking completed successfully"}


@router.post("/create", summary="Book against an existing payment")
def create(req: CreateBookingRequest, user: AuthUser = Depends(require_user)) -> dict:
    booking = booking_manager.book_itinerary({
        "userId": user.id,
        "itineraryId": req.itineraryId,
        "paymentId": req.paymentDetails.get("paymentId"),
        "contactInfo": req.travelerDetails,
        "specialRequests": req.specialRequests,
    })
    return {"success": True, "booking": booking, "message": "Booking created successfully!"}


@router.get("/status/{booking_id}", summary="Booking status")
def status(booking_id: str, user: AuthUser = Depends(require_user)) -> dict:
    return {"success": True, "booking": booking_manager.get_booking_status(booking_id, user.id)}


@router.post("/cancel/{booking_id}", summary="Cancel a booking")
def cancel(booking_id: str, req: CancelRequest, user: AuthUser = Depends(require_user)) -> dict:
    result = booking_manager.cancel_booking(booking_id, user.id, req.reason)
    return {"success": True, "cancellation": result, "message": "Booking cancelled successfully"}


@router.post("/{booking_id}/cancel", summary="Cancel a booking")
def cancel_alt(booking_id: str, req: CancelRequest, user: AuthUser = Depends(require_user)) -> dict:
    result = booking_manager.cancel_booking(booking_id, user.id, req.reason)
    return {"success": True, "result": result, "message": "Booking cancelled successfully!"}


@router.get("/my-bookings", summary="Caller's bookings, newest first")
def my_bookings(user: AuthUser = Depends(require_user)) -> dict:
    return {"success": True, "bookings": booking_manager.get_user_bookings(user.id)}


@router.get("/{booking_id}", summary="Booking details")
def details(booking_id: str, user: AuthUser = Depends(require_user)) -> dict:
    return {"success": True, "booking": booking_manager.get_booking_details(booking_id, user.id)}


@bookings_router.get("/bookings", summary="Caller's bookings, newest first")
def user_bookings(user: AuthUser = Depends(require_user)) -> dict:
    return {
        "success": True,
        "bookings": booking_manager.get_user_bookings(user.id),
        "message": "User bookings retrieved successfully!",
    }
