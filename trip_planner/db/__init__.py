"""
db/
----
Persistence layer.

  Document store: collections of JSON documents (users, itineraries,
    bookings, payments, shares, recommendation_tracking, user_analytics)
    backend:  STORE_BACKEND = in_memory | postgres
    schema:   trip_planner/db/schema.sql
    apply:    python -m trip_planner.scripts.run_migrations

Public exports:
    from trip_planner.db import get_store, now_iso
"""

from trip_planner.db.document_store import get_store, new_id, now_iso, reset_store

__all__ = ["get_store", "new_id", "now_iso", "reset_store"]
