from unittest.mock import MagicMock, patch

from trip_planner import config
from trip_planner.modules.tool_usage.emt_tool import EMTInventoryService

POST = "trip_planner.modules.tool_usage.emt_tool.requests.post"
GET = "trip_planner.modules.tool_usage.emt_tool.requests.get"


def _response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def test_search_sends_api_key_and_maps_fields(monkeypatch):
    monkeypatch.setattr(config, "EMT_API_KEY", "emt-key")
    payload = {"results": [{"id": "FL1"}], "total_results": 1, "search_id": "s-1"}
    with patch(POST, return_value=_response(payload)) as post:
        result = EMTInventoryService().search_inventory({"category": "transportation", "destination": "Goa"})

    assert post.call_args.kwargs["json"]["api_key"] == "emt-key"
    assert post.call_args.kwargs["json"]["passengers"] == 1
    assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer emt-key"
    assert result == {"success": True, "results": [{"id": "FL1"}], "totalResults": 1, "searchId": "s-1", "filters": {}}


def test_failures_are_reported_not_raised():
    service = EMTInventoryService()
    with patch(POST, side_effect=ConnectionError("down")), patch(GET, side_effect=ConnectionError("down")):
        assert service.search_inventory({})["results"] == []
        assert service.get_item_details("x")["item"] is None
        assert service.check_availability("x", "activities", "2026-12-01")["available"] is False
        assert service.get_booking_history("user-1")["totalBookings"] == 0
        assert service.cancel_booking("bk")["success"] is False


def test_booking_status_description():
    with patch(GET, return_value=_response({"booking_id": "bk-1", "status": "confirmed"})):
        status = EMTInventoryService().get_booking_status("bk-1")
    assert status["statusDescription"] == "Booking confirmed"


def test_search_transportation_defaults():
    service = EMTInventoryService()
    with patch.object(service, "search_inventory", return_value={"success": True}) as search:
        service.search_transportation("Mumbai", "Goa", "2026-12-01")
    params = search.call_args.args[0]
    assert params["subcategory"] == "flight"
    assert params["destination"] == "Mumbai to Goa"
    assert params["endDate"] == "2026-12-01"
    assert params["preferences"]["class"] == "economy"


def test_book_complete_itinerary_continues_past_failures():
    service = EMTInventoryService()
    itinerary = {"bookingInfo": {
        "transportation": [{"emtItemId": "FL1", "passengers": 2}],
        "accommodations": [{"emtItemId": "HT1", "guests": 2}],
        "activities": [{"emtItemId": "AC1", "participants": 2}],
    }}
    outcomes = [
        {"success": True, "bookingId": "b-1", "status": "confirmed"},
        {"success": False, "error": "sold out"},
        {"success": True, "bookingId": "b-3", "status": "pending"},
    ]
    with patch.object(service, "create_booking", side_effect=outcomes) as create:
        result = service.book_complete_itinerary(itinerary, {"name": "T"}, {"method": "card"})

    assert [c.args[0]["category"] for c in create.call_args_list] == ["transportation", "accommodation", "activities"]
    assert create.call_args_list[1].args[0]["passengers"] == 2
    assert result["success"] is True
    assert [b["type"] for b in result["bookings"]] == ["transportation", "activity"]
    assert result["errors"][0]["error"] == "sold out"
    assert result["summary"] == {"successful": 2, "failed": 1, "total": 3}


def test_validate_booking_data_order():
    service = EMTInventoryService()
    base = {
        "itemId": "HT1",
        "category": "accommodation",
        "startDate": "2026-12-01",
        "customerInfo": {"name": "T"},
        "paymentInfo": {"method": "card"},
    }
    assert service.validate_booking_data(base) == {"valid": True, "errors": []}
    assert service.validate_booking_data({**base, "startDate": "next week"})["errors"] == ["Invalid start date format"]
    errors = service.validate_booking_data({**base, "category": "spa"})["errors"]
    assert errors[0].startswith("Invalid category. Must be one of: transportation")


def test_booking_summary():
    summary = EMTInventoryService().generate_booking_summary([
        {"type": "activity", "status": "confirmed", "item": {"price": 1200}},
        {"type": "activity", "status": "pending", "item": {"price": 800}},
        {"type": "accommodation", "status": "confirmed", "item": {}},
    ])
    assert summary["byType"] == {"activity": 2, "accommodation": 1}
    assert summary["byStatus"] == {"confirmed": 2, "pending": 1}
    assert summary["totalAmount"] == 2000
    assert summary["currency"] == "INR"
