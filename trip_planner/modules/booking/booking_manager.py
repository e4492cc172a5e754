"""
modules/booking/booking_manager.py
-----------------------------------
Turns a saved itinerary into a confirmed booking record.

    transportation  → POST {EMT_BASE_URL}/book   (real call, per entry)
    accommodations  → simulated, ACC-XXXXXXXX confirmation code
    activities      → simulated for bookingRequired activities, ACT-XXXXXXXX

A failed transportation entry is kept with status "failed" and booking
carries on with the rest. The booking is stored in `bookings/{id}` and the
itinerary is flipped to status "booked".
"""

from __future__ import annotations

import logging
import re

import requests

from trip_planner import config
from trip_planner.db import get_store, new_id, now_iso
from trip_planner.errors import ForbiddenError, NotFoundError
from trip_planner.modules.observability.logger import get_audit_logger
from trip_planner.modules.sustainability.scoring import booking_info

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9.-]+")


def parse_cost(value) -> float:
    """'₹1,200' -> 1200.0; numbers pass through; anything unparseable is 0."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(_NON_NUMERIC.sub("", str(value)))
    except ValueError:
        return 0.0


def _emt_headers() -> dict:
    return {
        "Authorization": f"Bearer {config.EMT_API_KEY}",
        "Content-Type": "application/json",
    }


def _confirmation(prefix: str, booking_id: str) -> str:
    return f"{prefix}-{booking_id[:8].upper()}"


# ── needs extraction ───────────────────────────────────────────────────────────

def transportation_needs(doc: dict) -> list[dict]:
    return [
        {
            "route": t.get("route") or (f"{t['from']} to {t['to']}" if t.get("from") and t.get("to") else None),
            "date": t.get("date"),
            "time": t.get("time"),
            "passengers": t.get("passengers") or 1,
            "preferences": t.get("preferences") or {},
        }
        for t in booking_info(doc).get("transportation") or []
    ]


def accommodation_needs(doc: dict) -> list[dict]:
    return [
        {
            "name": a.get("name"),
            "checkIn": a.get("checkIn"),
            "checkOut": a.get("checkOut"),
            "guests": a.get("guests") or 1,
            "cost": a.get("price", a.get("cost")),
            "provider": a.get("provider"),
        }
        for a in booking_info(doc).get("accommodations") or []
    ]


def activity_needs(doc: dict) -> list[dict]:
    needs = []
    for day in ((doc or {}).get("itinerary") or {}).get("days") or []:
        for activity in day.get("activities") or []:
            if activity.get("bookingRequired"):
                needs.append({
                    "name": activity.get("activity"),
                    "date": day.get("date"),
                    "time": activity.get("time"),
                    "participants": activity.get("participants") or 1,
                    "cost": activity.get("cost"),
                    "provider": activity.get("provider"),
                })
    return needs


def calculate_total_cost(*groups: list[dict]) -> float:
    return sum(parse_cost(b.get("cost")) for group in groups for b in group if b.get("cost"))


class BookingManager:

    def __init__(self, store=None) -> None:
        self._store = store

    @property
    def store(self):
        return self._store or get_store()

    # ── per-type booking ─────────────────────────────────────────────────

    def book_transportation(self, doc: dict, contact_info: dict | None) -> list[dict]:
        bookings = []
        for transport in transportation_needs(doc):
            base = {
                "type": "transportation",
                "provider": "EMT",
                "route": transport["route"],
                "date": transport["date"],
                "time": transport["time"],
                "passengers": transport["passengers"],
            }
            try:
                resp = requests.post(
                    f"{config.EMT_BASE_URL.rstrip('/')}/book",
                    json={**transport, "contactInfo": contact_info},
                    headers=_emt_headers(),
                    timeout=config.EMT_REQUEST_TIMEOUT,
                )
                resp.raise_for_status()
                data = resp.json()
            except Exception as exc:
                logger.error("Error booking transportation for %s: %s", transport["route"], exc)
                bookings.append({**base, "status": "failed", "error": str(exc)})
                continue

            if data.get("success"):
                bookings.append({
                    **base,
                    "bookingId": data.get("bookingId"),
                    "cost": data.get("cost"),
                    "status": "confirmed",
                    "confirmationCode": data.get("confirmationCode"),
                    "ticketUrl": data.get("ticketUrl"),
                })
            else:
                bookings.append({**base, "status": "failed", "error": data.get("message") or "Booking rejected"})
        return bookings

    def book_accommodations(self, doc: dict) -> list[dict]:
        bookings = []
        for acc in accommodation_needs(doc):
            booking_id = new_id()
            bookings.append({
                "type": "accommodation",
                "provider": acc["provider"] or "Booking.com",
                "bookingId": booking_id,
                "name": acc["name"],
                "checkIn": acc["checkIn"],
                "checkOut": acc["checkOut"],
                "guests": acc["guests"],
                "cost": acc["cost"],
                "status": "confirmed",
                "confirmationCode": _confirmation("ACC", booking_id),
                "bookingUrl": f"https://booking.com/confirmation/{booking_id}",
            })
        return bookings

    def book_activities(self, doc: dict) -> list[dict]:
        bookings = []
        for act in activity_needs(doc):
            booking_id = new_id()
            bookings.append({
                "type": "activity",
                "provider": act["provider"] or "Viator",
                "bookingId": booking_id,
                "name": act["name"],
                "date": act["date"],
                "time": act["time"],
                "participants": act["participants"],
                "cost": act["cost"],
                "status": "confirmed",
                "confirmationCode": _confirmation("ACT", booking_id),
                "bookingUrl": f"https://viator.com/confirmation/{booking_id}",
            })
        return bookings

    # ── public operations ────────────────────────────────────────────────

    def book_itinerary(self, data: dict) -> dict:
        itinerary_id = data.get("itineraryId")
        doc = self.store.get("itineraries", itinerary_id) if itinerary_id else None
        if doc is None:
            raise NotFoundError("Itinerary not found")

        contact_info = data.get("contactInfo")
        transportation = self.book_transportation(doc, contact_info)
        accommodations = self.book_accommodations(doc)
        activities = self.book_activities(doc)

        booking_id = new_id()
        timestamp = now_iso()
        booking = {
            "id": booking_id,
            "userId": data.get("userId"),
            "itineraryId": itinerary_id,
            "paymentId": data.get("paymentId"),
            "status": "confirmed",
            "contactInfo": contact_info,
            "specialRequests": data.get("specialRequests") or [],
            "bookings": {
                "transportation": transportation,
                "accommodations": accommodations,
                "activities": activities,
            },
            "totalCost": calculate_total_cost(transportation, accommodations, activities),
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }
        self.store.set("bookings", booking_id, booking)
        self.store.update("itineraries", itinerary_id, {
            "status": "booked",
            "bookingId": booking_id,
            "updatedAt": timestamp,
        })

        self._send_confirmation(booking)
        return booking

    def _owned_booking(self, booking_id: str, user_id: str) -> dict:
        booking = self.store.get("bookings", booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        if booking.get("userId") != user_id:
            raise ForbiddenError("Unauthorized access to booking")
        return booking

    def get_booking_status(self, booking_id: str, user_id: str) -> dict:
        booking = self._owned_booking(booking_id, user_id)
        refreshed = self._refresh_statuses(booking.get("bookings") or {})
        if refreshed != booking.get("bookings"):
            booking = self.store.update("bookings", booking_id, {
                "bookings": refreshed,
                "updatedAt": now_iso(),
            })
        return booking

    def get_booking_details(self, booking_id: str, user_id: str) -> dict:
        return self._owned_booking(booking_id, user_id)

    def cancel_booking(self, booking_id: str, user_id: str, reason: str | None = None) -> dict:
        booking = self._owned_booking(booking_id, user_id)
        results = self._cancel_individual((booking.get("bookings") or {}).get("transportation") or [])

        timestamp = now_iso()
        self.store.update("bookings", booking_id, {
            "status": "cancelled",
            "cancellationReason": reason,
            "cancelledAt": timestamp,
            "updatedAt": timestamp,
        })
        get_audit_logger().log("bookings", "booking_cancelled", {
            "bookingId": booking_id, "userId": user_id, "reason": reason,
        })

        return {
            "bookingId": booking_id,
            "status": "cancelled",
            "cancellationResults": results,
            # Amount depends on the provider cancellation policy; settled later
            "refund": {"refundId": new_id(), "amount": 0, "status": "pending", "reason": reason},
        }

    def get_user_bookings(self, user_id: str) -> list[dict]:
        return self.store.query("bookings", {"userId": user_id}, order_by="createdAt", descending=True)

    # ── internals ────────────────────────────────────────────────────────

    @staticmethod
    def _refresh_statuses(bookings: dict) -> dict:
        # Providers expose no status endpoint yet; statuses are returned as stored.
        return bookings

    @staticmethod
    def _cancel_individual(transportation: list[dict]) -> list[dict]:
        results = []
        for booking in transportation:
            if booking.get("status") != "confirmed":
                continue
            try:
                resp = requests.post(
                    f"{config.EMT_BASE_URL.rstrip('/')}/cancel",
                    json={"bookingId": booking.get("bookingId")},
                    headers=_emt_headers(),
                    timeout=config.EMT_REQUEST_TIMEOUT,
                )
                resp.raise_for_status()
                results.append({"type": "transportation", "bookingId": booking.get("bookingId"), "status": "cancelled"})
            except Exception as exc:
                logger.error("Error cancelling transportation booking %s: %s", booking.get("bookingId"), exc)
                results.append({
                    "type": "transportation",
                    "bookingId": booking.get("bookingId"),
                    "status": "cancellation_failed",
                    "error": str(exc),
                })
        return results

    @staticmethod
    def _send_confirmation(booking: dict) -> None:
        logger.info("Sending booking confirmation for %s", booking["id"])
        get_audit_logger().log("bookings", "booking_confirmed", {
            "bookingId": booking["id"],
            "userId": booking.get("userId"),
            "itineraryId": booking.get("itineraryId"),
            "totalCost": booking["totalCost"],
        })


booking_manager = BookingManager()
