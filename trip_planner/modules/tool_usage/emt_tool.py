"""
modules/tool_usage/emt_tool.py
-------------------------------
Client for the EMT inventory / booking REST API.

Endpoints (base: EMT_BASE_URL, default https://api.emt.com/v1):
    POST /inventory/search
    GET  /inventory/item/{item_id}
    POST /inventory/availability
    GET  /pricing/realtime
    POST /bookings/create
    GET  /bookings/{booking_id}
    GET  /bookings/{booking_id}/confirmation
    POST /bookings/{booking_id}/cancel
    POST /bookings/{booking_id}/modify
    GET  /bookings/history

Auth: `Authorization: Bearer <EMT_API_KEY>` plus `api_key` in the JSON body
(POST) or query string (GET). Every call returns a dict with `success`;
failures are logged and reported as `{"success": False, "error": ...}`,
never raised.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import requests

from trip_planner import config

logger = logging.getLogger(__name__)


SERVICE_CATEGORIES: dict[str, dict[str, str]] = {
    "transportation": {
        "flight":     "Airline tickets and flights",
        "train":      "Railway tickets and train services",
        "bus":        "Bus tickets and intercity transport",
        "metro":      "Local metro and public transport",
        "taxi":       "Taxi and cab services",
        "car_rental": "Car rental services",
    },
    "accommodation": {
        "hotel":     "Hotels and resorts",
        "hostel":    "Hostels and budget accommodations",
        "homestay":  "Homestays and local accommodations",
        "apartment": "Apartment rentals",
        "villa":     "Villa and luxury rentals",
    },
    "activities": {
        "tours":         "Guided tours and sightseeing",
        "adventures":    "Adventure activities and sports",
        "cultural":      "Cultural experiences and workshops",
        "food":          "Food tours and culinary experiences",
        "entertainment": "Entertainment and shows",
        "wellness":      "Wellness and spa services",
    },
    "services": {
        "insurance":   "Travel insurance",
        "visa":        "Visa assistance",
        "guide":       "Local guide services",
        "translation": "Translation services",
        "concierge":   "Concierge services",
    },
}

BOOKING_STATUS: dict[str, str] = {
    "pending":   "Booking is being processed",
    "confirmed": "Booking confirmed",
    "cancelled": "Booking cancelled",
    "completed": "Service completed",
    "refunded":  "Booking refunded",
}

_REQUIRED_BOOKING_FIELDS = ("itemId", "category", "startDate", "customerInfo", "paymentInfo")

# bookingInfo key -> (EMT category, summary type, party-size field)
_ITINERARY_SECTIONS: list[tuple[str, str, str, str]] = [
    ("transportation", "transportation", "transportation", "passengers"),
    ("accommodations", "accommodation",  "accommodation",  "guests"),
    ("activities",     "activities",     "activity",       "participants"),
]


# ── HTTP helpers ───────────────────────────────────────────────────────────────

def _headers(with_body: bool = False) -> dict[str, str]:
    headers = {"Authorization": f"Bearer {config.EMT_API_KEY}"}
    if with_body:
        headers["Content-Type"] = "application/json"
    return headers


def _url(path: str) -> str:
    return f"{config.EMT_BASE_URL.rstrip('/')}/{path.lstrip('/')}"


def _emt_post(path: str, body: dict) -> dict:
    resp = requests.post(
        _url(path),
        json={**body, "api_key": config.EMT_API_KEY},
        headers=_headers(with_body=True),
        timeout=config.EMT_REQUEST_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


def _emt_get(path: str, params: dict | None = None) -> dict:
    resp = requests.get(
        _url(path),
        params={**(params or {}), "api_key": config.EMT_API_KEY},
        headers=_headers(),
        timeout=config.EMT_REQUEST_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


def _parse_date(value: Any) -> datetime | None:
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


# ── Service ────────────────────────────────────────────────────────────────────

class EMTInventoryService:

    # ── inventory ─────────────────────────────────────────────────────────

    def search_inventory(self, params: dict) -> dict:
        body = {
            "category":    params.get("category"),
            "subcategory": params.get("subcategory"),
            "destination": params.get("destination"),
            "start_date":  params.get("startDate"),
            "end_date":    params.get("endDate"),
            "passengers":  params.get("passengers", 1),
            "budget":      params.get("budget"),
            "preferences": params.get("preferences") or {},
        }
        try:
            data = _emt_post("inventory/search", body)
        except Exception as exc:
            logger.error("Error searching EMT inventory: %s", exc)
            return {"success": False, "error": str(exc), "results": [], "totalResults": 0}
        return {
            "success": True,
            "results": data.get("results") or [],
            "totalResults": data.get("total_results") or 0,
            "searchId": data.get("search_id"),
            "filters": data.get("available_filters") or {},
        }

    def get_item_details(self, item_id: str, category: str | None = None) -> dict:
        try:
            data = _emt_get(f"inventory/item/{item_id}", {"category": category})
        except Exception as exc:
            logger.error("Error getting item details for %s: %s", item_id, exc)
            return {"success": False, "error": str(exc), "item": None}
        return {
            "success": True,
            "item": data.get("item"),
            "availability": data.get("availability"),
            "pricing": data.get("pricing"),
            "policies": data.get("policies"),
        }

    def check_availability(
        self,
        item_id: str,
        category: str,
        start_date: str,
        end_date: str | None = None,
        passengers: int = 1,
    ) -> dict:
        try:
            data = _emt_post("inventory/availability", {
                "item_id": item_id,
                "category": category,
                "start_date": start_date,
                "end_date": end_date,
                "passengers": passengers,
            })
        except Exception as exc:
            logger.error("Error checking availability for %s: %s", item_id, exc)
            return {"success": False, "error": str(exc), "available": False}
        return {
            "success": True,
            "available": data.get("available"),
            "price": data.get("price"),
            "currency": data.get("currency"),
            "availability": data.get("availability_details"),
            "bookingDeadline": data.get("booking_deadline"),
        }

    def get_real_time_pricing(
        self,
        item_id: str,
        category: str,
        start_date: str,
        end_date: str | None = None,
        passengers: int = 1,
    ) -> dict:
        try:
            data = _emt_get("pricing/realtime", {
                "item_id": item_id,
                "category": category,
                "start_date": start_date,
                "end_date": end_date,
                "passengers": passengers,
            })
        except Exception as exc:
            logger.error("Error getting real-time pricing for %s: %s", item_id, exc)
            return {"success": False, "error": str(exc), "price": None}
        return {
            "success": True,
            "price": data.get("price"),
            "currency": data.get("currency"),
            "originalPrice": data.get("original_price"),
            "discount": data.get("discount"),
            "taxes": data.get("taxes"),
            "fees": data.get("fees"),
            "totalPrice": data.get("total_price"),
            "priceValidUntil": data.get("price_valid_until"),
            "dynamicPricing": data.get("dynamic_pricing"),
        }

    # ── bookings ──────────────────────────────────────────────────────────

    def create_booking(self, booking: dict) -> dict:
        try:
            data = _emt_post("bookings/create", {
                "item_id": booking.get("itemId"),
                "category": booking.get("category"),
                "start_date": booking.get("startDate"),
                "end_date": booking.get("endDate"),
                "passengers": booking.get("passengers"),
                "customer_info": booking.get("customerInfo"),
                "payment_info": booking.get("paymentInfo"),
                "special_requests": booking.get("specialRequests") or [],
            })
        except Exception as exc:
            logger.error("Error creating EMT booking: %s", exc)
            return {"success": False, "error": str(exc), "bookingId": None}
        return {
            "success": True,
            "bookingId": data.get("booking_id"),
            "status": data.get("status"),
            "confirmationNumber": data.get("confirmation_number"),
            "totalAmount": data.get("total_amount"),
            "currency": data.get("currency"),
            "bookingDetails": data.get("booking_details"),
            "cancellationPolicy": data.get("cancellation_policy"),
        }

    def get_booking_status(self, booking_id: str) -> dict:
        try:
            data = _emt_get(f"bookings/{booking_id}")
        except Exception as exc:
            logger.error("Error getting EMT booking status %s: %s", booking_id, exc)
            return {"success": False, "error": str(exc), "bookingId": None}
        return {
            "success": True,
            "bookingId": data.get("booking_id"),
            "status": data.get("status"),
            "statusDescription": BOOKING_STATUS.get(data.get("status")),
            "bookingDetails": data.get("booking_details"),
            "totalAmount": data.get("total_amount"),
            "currency": data.get("currency"),
            "confirmationNumber": data.get("confirmation_number"),
            "cancellationPolicy": data.get("cancellation_policy"),
            "lastUpdated": data.get("last_updated"),
        }

    def get_booking_confirmation(self, booking_id: str) -> dict:
        try:
            data = _emt_get(f"bookings/{booking_id}/confirmation")
        except Exception as exc:
            logger.error("Error getting EMT booking confirmation %s: %s", booking_id, exc)
            return {"success": False, "error": str(exc), "confirmation": None}
        return {
            "success": True,
            "confirmation": {
                "bookingId": data.get("booking_id"),
                "confirmationNumber": data.get("confirmation_number"),
                "status": data.get("status"),
                "itemDetails": data.get("item_details"),
                "customerInfo": data.get("customer_info"),
                "bookingDates": data.get("booking_dates"),
                "totalAmount": data.get("total_amount"),
                "currency": data.get("currency"),
                "cancellationPolicy": data.get("cancellation_policy"),
                "contactInfo": data.get("contact_info"),
                "specialInstructions": data.get("special_instructions"),
            },
        }

    def cancel_booking(self, booking_id: str, reason: str = "User requested cancellation") -> dict:
        try:
            data = _emt_post(f"bookings/{booking_id}/cancel", {"reason": reason})
        except Exception as exc:
            logger.error("Error cancelling EMT booking %s: %s", booking_id, exc)
            return {"success": False, "error": str(exc), "bookingId": None}
        return {
            "success": True,
            "bookingId": data.get("booking_id"),
            "status": data.get("status"),
            "refundAmount": data.get("refund_amount"),
            "refundCurrency": data.get("refund_currency"),
            "refundStatus": data.get("refund_status"),
            "cancellationFee": data.get("cancellation_fee"),
        }

    def modify_booking(self, booking_id: str, modifications: dict) -> dict:
        try:
            data = _emt_post(f"bookings/{booking_id}/modify", {"modifications": modifications})
        except Exception as exc:
            logger.error("Error modifying EMT booking %s: %s", booking_id, exc)
            return {"success": False, "error": str(exc), "bookingId": None}
        return {
            "success": True,
            "bookingId": data.get("booking_id"),
            "status": data.get("status"),
            "modifications": data.get("applied_modifications"),
            "priceDifference": data.get("price_difference"),
            "newTotalAmount": data.get("new_total_amount"),
            "currency": data.get("currency"),
        }

    def get_booking_history(self, user_id: str, limit: int = 10, offset: int = 0) -> dict:
        try:
            data = _emt_get("bookings/history", {"user_id": user_id, "limit": limit, "offset": offset})
        except Exception as exc:
            logger.error("Error getting EMT booking history for %s: %s", user_id, exc)
            return {"success": False, "error": str(exc), "bookings": [], "totalBookings": 0}
        return {
            "success": True,
            "bookings": data.get("bookings") or [],
            "totalBookings": data.get("total_bookings") or 0,
            "hasMore": data.get("has_more") or False,
        }

    # ── category searches ─────────────────────────────────────────────────

    def search_transportation(
        self,
        origin: str,
        destination: str,
        start_date: str,
        passengers: int = 1,
        preferences: dict | None = None,
    ) -> dict:
        prefs = preferences or {}
        return self.search_inventory({
            "category": "transportation",
            "subcategory": prefs.get("mode") or "flight",
            "destination": f"{origin} to {destination}",
            "startDate": start_date,
            "endDate": start_date,   # one-way
            "passengers": passengers,
            "budget": prefs.get("budget"),
            "preferences": {
                "class": prefs.get("class") or "economy",
                "direct_flight": prefs.get("directFlight") or False,
                "flexible_dates": prefs.get("flexibleDates") or False,
            },
        })

    def search_accommodation(
        self,
        destination: str,
        start_date: str,
        end_date: str,
        guests: int = 1,
        preferences: dict | None = None,
    ) -> dict:
        prefs = preferences or {}
        return self.search_inventory({
            "category": "accommodation",
            "subcategory": prefs.get("type") or "hotel",
            "destination": destination,
            "startDate": start_date,
            "endDate": end_date,
            "passengers": guests,
            "budget": prefs.get("budget"),
            "preferences": {
                "amenities": prefs.get("amenities") or [],
                "rating": prefs.get("rating") or 3,
                "location": prefs.get("location") or "city_center",
                "breakfast_included": prefs.get("breakfastIncluded") or False,
            },
        })

    def search_activities(
        self,
        destination: str,
        start_date: str,
        end_date: str,
        participants: int = 1,
        preferences: dict | None = None,
    ) -> dict:
        prefs = preferences or {}
        return self.search_inventory({
            "category": "activities",
            "subcategory": prefs.get("type") or "tours",
            "destination": destination,
            "startDate": start_date,
            "endDate": end_date,
            "passengers": participants,
            "budget": prefs.get("budget"),
            "preferences": {
                "duration": prefs.get("duration") or "half_day",
                "difficulty": prefs.get("difficulty") or "easy",
                "language": prefs.get("language") or "english",
                "group_size": prefs.get("groupSize") or "small",
            },
        })

    def book_complete_itinerary(self, itinerary: dict, customer_info: dict, payment_info: dict) -> dict:
        """
        Book every bookingInfo entry (transportation, accommodations, activities)
        in that order. One failed item does not stop the others.
        """
        bookings: list[dict] = []
        errors: list[dict] = []
        booking_info = (itinerary or {}).get("bookingInfo") or {}

        for section, category, kind, party_field in _ITINERARY_SECTIONS:
            for item in booking_info.get(section) or []:
                try:
                    result = self.create_booking({
                        "itemId": item.get("emtItemId"),
                        "category": category,
                        "startDate": item.get("startDate"),
                        "endDate": item.get("endDate"),
                        "passengers": item.get(party_field),
                        "customerInfo": customer_info,
                        "paymentInfo": payment_info,
                        "specialRequests": item.get("specialRequests") or [],
                    })
                except Exception as exc:
                    result = {"success": False, "error": str(exc)}

                if result["success"]:
                    bookings.append({
                        "type": kind,
                        "bookingId": result["bookingId"],
                        "item": item,
                        "status": result.get("status"),
                    })
                else:
                    errors.append({"type": kind, "item": item, "error": result.get("error")})

        return {
            "success": len(bookings) > 0,
            "bookings": bookings,
            "errors": errors,
            "totalBookings": len(bookings),
            "totalErrors": len(errors),
            "summary": {
                "successful": len(bookings),
                "failed": len(errors),
                "total": len(bookings) + len(errors),
            },
        }

    # ── static data / validation ──────────────────────────────────────────

    def get_service_categories(self) -> dict:
        return SERVICE_CATEGORIES

    def get_booking_status_descriptions(self) -> dict:
        return BOOKING_STATUS

    def validate_booking_data(self, booking: dict) -> dict:
        missing = [f for f in _REQUIRED_BOOKING_FIELDS if not booking.get(f)]
        if missing:
            return {"valid": False, "errors": [f"Missing required fields: {', '.join(missing)}"]}

        if _parse_date(booking["startDate"]) is None:
            return {"valid": False, "errors": ["Invalid start date format"]}

        if booking["category"] not in SERVICE_CATEGORIES:
            return {
                "valid": False,
                "errors": [f"Invalid category. Must be one of: {', '.join(SERVICE_CATEGORIES)}"],
            }

        return {"valid": True, "errors": []}

    def generate_booking_summary(self, bookings: list[dict]) -> dict:
        summary: dict[str, Any] = {
            "totalBookings": len(bookings),
            "byType": {},
            "byStatus": {},
            "totalAmount": 0,
            "currency": "INR",
        }
        for booking in bookings:
            summary["byType"][booking.get("type")] = summary["byType"].get(booking.get("type"), 0) + 1
            summary["byStatus"][booking.get("status")] = summary["byStatus"].get(booking.get("status"), 0) + 1
            price = (booking.get("item") or {}).get("price")
            if isinstance(price, (int, float)):
                summary["totalAmount"] += price
        return summary


emt_service = EMTInventoryService()
