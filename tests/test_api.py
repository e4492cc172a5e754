from unittest.mock import patch

import pytest

from trip_planner import config
from trip_planner.auth import issue_token

PROCESS_PAYMENT = "trip_planner.api.routes.booking.payment_gateway.process_payment"

SUSTAINABILITY_DOC = {
    "id": "trip-1",
    "itinerary": {"days": [{
        "transportation": {"mode": "metro", "distance": "10 km"},
        "activities": [{"activity": "Nature walk in the hills"}],
        "meals": [{"cuisine": "Local thali", "restaurant": "Annapurna"}],
    }]},
    "bookingInfo": {"accommodations": [{"type": "eco_lodge"}]},
}

GENERATE_BODY = {
    "from": "Mumbai",
    "destination": "Goa",
    "duration": 2,
    "budget": 20000,
    "interests": ["beach"],
}


def test_health_and_security_headers(anon_client):
    resp = anon_client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "OK"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_health_reports_backends(anon_client, monkeypatch):
    body = anon_client.get("/api/health").json()
    assert (body["store"], body["llm"], body["rateLimit"]) == ("in_memory", "stub", "memory")

    monkeypatch.setattr(config, "USE_STUB_LLM", False)
    monkeypatch.setattr(config, "GEMINI_API_KEY", "key")
    assert anon_client.get("/api/health").json()["llm"] == "gemini"


def test_rate_limit_returns_429_with_cors(anon_client, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_MAX_REQUESTS", 2)
    origin = {"Origin": config.FRONTEND_URL}
    assert anon_client.get("/api/health", headers=origin).status_code == 200
    assert anon_client.get("/api/health", headers=origin).status_code == 200
    resp = anon_client.get("/api/health", headers=origin)
    assert resp.status_code == 429
    assert resp.json()["error"] == "Too many requests"
    assert 0 < resp.json()["retryAfter"] <= config.RATE_LIMIT_WINDOW_SECONDS
    assert resp.headers["Retry-After"] == str(resp.json()["retryAfter"])
    assert resp.headers["access-control-allow-origin"] == config.FRONTEND_URL


def test_rate_limit_windows_are_per_identity(anon_client, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_MAX_REQUESTS", 1)
    assert anon_client.get("/api/health").status_code == 200
    assert anon_client.get("/api/health").status_code == 429
    token = issue_token("user-2", "two@example.com")
    resp = anon_client.get("/api/health", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


# ── AI ────────────────────────────────────────────────────────────────────────

def test_generate_itinerary_requires_core_params(anon_client):
    resp = anon_client.post("/api/ai/generate-itinerary", json={"destination": "Goa"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required itinerary parameters"


def test_generate_itinerary_anonymous_is_demo_user(anon_client, store):
    resp = anon_client.post("/api/ai/generate-itinerary", json=GENERATE_BODY)
    assert resp.status_code == 200
    doc = resp.json()["itinerary"]
    assert doc["userId"] == "demo-user"
    assert len(doc["itinerary"]["days"]) == 2
    assert store.get("itineraries", doc["id"])["params"]["from"] == "Mumbai"


def test_weather_adjustments_accept_plain_condition(anon_client):
    resp = anon_client.post("/api/ai/weather-adjustments", json={
        "itinerary": {"days": [{"day": 1, "activities": [{"activity": "Sunset at Calangute beach"}]}]},
        "weatherData": "rainy",
    })
    assert resp.status_code == 200
    assert resp.json()["adjustments"]["conditions"] == ["rainy"]


def test_adjust_itinerary_of_another_user_is_403(client, store, trip_doc):
    store.set("itineraries", "theirs", {**trip_doc, "userId": "someone-else"})
    resp = client.post("/api/ai/adjust-itinerary", json={"itineraryId": "theirs", "reason": "rain"})
    assert resp.status_code == 403
    assert resp.json()["success"] is False


def test_social_templates_route(anon_client, trip_doc):
    resp = anon_client.post("/api/social/templates", json={"itinerary": trip_doc, "platform": "instagram"})
    assert resp.status_code == 200
    assert set(resp.json()["templates"]) == {"instagram"}


# ── trips ─────────────────────────────────────────────────────────────────────

def test_trip_crud(client, store):
    saved = client.post("/api/trips/save", json={"title": "Goa long weekend", "userId": "spoofed"}).json()
    trip_id = saved["itineraryId"]
    assert store.get("itineraries", trip_id)["userId"] == "user-1"

    assert client.get(f"/api/trips/{trip_id}").json()["itinerary"]["title"] == "Goa long weekend"

    client.put(f"/api/trips/{trip_id}", json={"title": "Goa, extended", "createdAt": "1999-01-01"})
    updated = store.get("itineraries", trip_id)
    assert updated["title"] == "Goa, extended"
    assert updated["createdAt"] != "1999-01-01"

    share = client.post(f"/api/trips/{trip_id}/share", json={"shareWith": "friend@example.com"}).json()
    assert store.get("shares", share["shareId"])["permissions"] == ["read"]

    assert [t["id"] for t in client.get("/api/trips/history").json()["trips"]] == [trip_id]

    client.delete(f"/api/trips/{trip_id}")
    assert client.get(f"/api/trips/{trip_id}").status_code == 404


def test_trip_of_another_user_is_403(client, store, trip_doc):
    store.set("itineraries", "theirs", {**trip_doc, "userId": "someone-else"})
    resp = client.get("/api/trips/theirs")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Unauthorized access"


def test_popular_destinations_is_public(anon_client):
    destinations = anon_client.get("/api/trips/popular-destinations").json()["destinations"]
    assert destinations[0]["name"] == "Paris, France"


# ── booking ───────────────────────────────────────────────────────────────────

def test_book_requires_fields(client):
    resp = client.post("/api/booking/book", json={"itineraryId": "x"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required fields: itineraryId, paymentMethod, paymentDetails"


def test_book_payment_failure_is_400(client):
    with patch(PROCESS_PAYMENT, return_value={"success": False, "message": "Card declined"}):
        resp = client.post("/api/booking/book", json={
            "itineraryId": "x", "paymentMethod": "stripe", "paymentDetails": {"amount": 100},
        })
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Payment failed: Card declined"


def test_book_then_manage(client, store, trip_doc):
    store.set("itineraries", "trip-1", trip_doc)
    payment = {"success": True, "paymentId": "pi_1", "transactionId": "pi_1", "status": "completed"}
    with patch(PROCESS_PAYMENT, return_value=payment) as process:
        resp = client.post("/api/booking/book", json={
            "itineraryId": "trip-1",
            "paymentMethod": "stripe",
            "paymentDetails": {"amount": 5700, "currency": "INR", "token": "pm_x"},
        })
    assert resp.status_code == 200
    assert process.call_args.args[0]["currency"] == "INR"
    booking = resp.json()["booking"]
    assert booking["paymentId"] == "pi_1"

    assert client.get(f"/api/booking/{booking['id']}").json()["booking"]["id"] == booking["id"]
    assert [b["id"] for b in client.get("/api/bookings").json()["bookings"]] == [booking["id"]]

    cancelled = client.post(f"/api/booking/{booking['id']}/cancel", json={"reason": "plans changed"})
    assert cancelled.status_code == 200
    assert store.get("bookings", booking["id"])["status"] == "cancelled"


def test_missing_booking_uses_error_envelope(client):
    resp = client.get("/api/booking/missing")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Booking not found", "message": "Booking not found"}


# ── payment ───────────────────────────────────────────────────────────────────

def test_payment_validation(client):
    assert client.post("/api/payment/process", json={"amount": 10}).json()["detail"] == \
        "Missing required fields: amount, paymentMethod, paymentDetails"
    assert client.post("/api/payment/razorpay/order", json={}).json()["detail"] == "Amount is required"
    assert client.post("/api/payment/refund", json={"paymentId": "p"}).json()["detail"] == \
        "Missing required fields: paymentId, paymentMethod"
    assert client.get("/api/payment/status/p").json()["detail"] == "Payment method is required"


def test_unsupported_payment_method_is_400(client):
    resp = client.post("/api/payment/process", json={
        "amount": 10, "paymentMethod": "cash", "paymentDetails": {"note": "x"},
    })
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Payment failed: Unsupported payment method: cash"


def test_razorpay_webhook_is_public(anon_client, audit):
    resp = anon_client.post("/api/payment/razorpay/webhook", json={"event": "payment.authorized"})
    assert resp.json() == {"received": True}


# ── open routes ───────────────────────────────────────────────────────────────

def test_emt_book_validation(anon_client):
    resp = anon_client.post("/api/emt/book", json={"itemId": "HTL001"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required fields: category, startDate, customerInfo, paymentInfo"


def test_track_recommendation_rejects_unknown_action(anon_client):
    resp = anon_client.post("/api/analytics/track-recommendation", json={
        "userId": "user-1", "recommendationId": "rec-1", "action": "liked",
    })
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid action. Must be one of: viewed, clicked, booked, ignored"


def test_sustainability_routes(anon_client):
    body = {"itinerary": SUSTAINABILITY_DOC}
    footprint = anon_client.post("/api/sustainability/carbon-footprint", json=body).json()["carbonFootprint"]
    assert footprint["rating"]["level"] == "excellent"
    impact = anon_client.post("/api/sustainability/local-impact", json=body).json()["localImpact"]
    assert impact["score"] == 125
    progress = anon_client.post("/api/sustainability/progress", json={**body, "userId": "user-1"}).json()
    assert "Eco Warrior" in progress["progress"]["achievements"]


def test_sustainability_progress_accepts_string_passengers(anon_client):
    trip = {"itinerary": {"days": [{"transportation": {"mode": "car", "distance": 100, "passengers": "2"}}]}}
    resp = anon_client.post("/api/sustainability/progress", json={"itinerary": trip, "userId": "user-1"})
    assert resp.status_code == 200
    # 300 kg reference minus 38.4 kg for the car leg
    assert resp.json()["progress"]["carbonSaved"] == pytest.approx(261.6)

    footprint = anon_client.post("/api/sustainability/carbon-footprint", json={"itinerary": trip}).json()
    assert footprint["carbonFootprint"]["totalCarbon"] == pytest.approx(38.4)


def test_notifications_are_audited(anon_client, audit):
    email = anon_client.post("/api/send-confirmation-email", json={
        "email": "traveller@example.com", "bookingId": "BK-1",
    }).json()
    assert email["emailData"]["subject"] == "Trip Booking Confirmed - BK-1"

    anon_client.post("/api/send-sms", json={"phone": "+919800000000", "message": "Booked!"})
    assert [r["event_type"] for r in audit.read("notifications")] == ["email_sent", "sms_sent"]
