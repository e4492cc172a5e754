"""
api/routes/notifications.py
---------------------------
Simulated confirmation email and SMS. Nothing leaves the process; each
message is logged and written to the "notifications" audit stream.

    POST /api/send-confirmation-email
    POST /api/send-sms
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from trip_planner.db import now_iso
from trip_planner.modules.observability.logger import get_audit_logger

logger = logging.getLogger(__name__)

router = APIRouter()


class EmailRequest(BaseModel):
    email: str
    bookingId: str
    itinerary: Optional[dict] = None
    booking: Optional[dict] = None


class SmsRequest(BaseModel):
    phone: str
    message: str
    bookingId: Optional[str] = None


@router.post("/send-confirmation-email", summary="Send a booking confirmation email")
def send_confirmation_email(req: EmailRequest) -> dict:
    email_data = {
        "to": req.email,
        "subject": f"Trip Booking Confirmed - {req.bookingId}",
        "bookingId": req.bookingId,
        "itinerary": req.itinerary,
        "booking": req.booking,
        "sentAt": now_iso(),
    }
    logger.info("Confirmation email sent to %s for booking %s", req.email, req.bookingId)
    get_audit_logger().log("notifications", "email_sent", email_data)
    return {"success": True, "message": "Confirmation email sent successfully!", "emailData": email_data}


@router.post("/send-sms", summary="Send an SMS")
def send_sms(req: SmsRequest) -> dict:
    sms_data = {
        "to": req.phone,
        "message": req.message,
        "bookingId": req.bookingId,
        "sentAt": now_iso(),
    }
    logger.info("SMS sent to %s for booking %s", req.phone, req.bookingId)
    get_audit_logger().log("notifications", "sms_sent", sms_data)
    return {"success": True, "message": "SMS sent successfully!", "smsData": sms_data}
