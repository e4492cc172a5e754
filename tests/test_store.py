import pytest

from trip_planner.db.document_store import InMemoryDocumentStore
from trip_planner.errors import NotFoundError


@pytest.fixture
def mem():
    return InMemoryDocumentStore()


def test_add_returns_id_and_document_carries_it(mem):
    doc_id = mem.add("users", {"email": "a@example.com"})
    doc = mem.get("users", doc_id)
    assert doc == {"email": "a@example.com", "id": doc_id}


def test_add_keeps_explicit_id(mem):
    assert mem.add("payments", {"id": "pay_1", "amount": 10}) == "pay_1"
    assert mem.get("payments", "pay_1")["amount"] == 10


def test_get_missing_is_none(mem):
    assert mem.get("users", "nope") is None


def test_documents_are_copied(mem):
    mem.set("itineraries", "i1", {"days": [1, 2]})
    doc = mem.get("itineraries", "i1")
    doc["days"].append(3)
    assert mem.get("itineraries", "i1")["days"] == [1, 2]


def test_update_merges_fields(mem):
    mem.set("bookings", "b1", {"status": "confirmed", "userId": "u"})
    updated = mem.update("bookings", "b1", {"status": "cancelled"})
    assert updated == {"status": "cancelled", "userId": "u", "id": "b1"}


def test_update_missing_raises(mem):
    with pytest.raises(NotFoundError):
        mem.update("bookings", "missing", {"status": "x"})


def test_delete(mem):
    mem.set("shares", "s1", {})
    assert mem.delete("shares", "s1") is True
    assert mem.delete("shares", "s1") is False


def test_query_filters_orders_and_limits(mem):
    mem.set("itineraries", "a", {"userId": "u1", "createdAt": "2026-01-01"})
    mem.set("itineraries", "b", {"userId": "u1", "createdAt": "2026-03-01"})
    mem.set("itineraries", "c", {"userId": "u2", "createdAt": "2026-02-01"})
    mem.set("itineraries", "d", {"userId": "u1", "createdAt": "2026-02-01"})

    rows = mem.query("itineraries", {"userId": "u1"}, order_by="createdAt", descending=True)
    assert [r["id"] for r in rows] == ["b", "d", "a"]

    rows = mem.query("itineraries", {"userId": "u1"}, order_by="createdAt", limit=2)
    assert [r["id"] for r in rows] == ["a", "d"]
