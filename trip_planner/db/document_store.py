"""
db/document_store.py
---------------------
Collection/document persistence used by every service.

Two backends share one interface:
  InMemoryDocumentStore: dict of dicts, process-local (default, tests)
  PostgresDocumentStore: single JSONB `documents` table via the psycopg2 pool

Pick one with STORE_BACKEND ("in_memory" | "postgres"). Documents are plain
JSON-serialisable dicts; every returned document carries its `id`.

Collections in use:
    users, itineraries, bookings, payments, shares,
    recommendation_tracking, user_analytics
"""

from __future__ import annotations

import copy
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from trip_planner import config
from trip_planner.errors import NotFoundError


def now_iso() -> str:
    """UTC timestamp in ISO-8601; sorts lexicographically."""
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


class DocumentStore(ABC):

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> dict: ...

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> dict | None: ...

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict: ...

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool: ...

    @abstractmethod
    def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]: ...

    def add(self, collection: str, data: dict[str, Any]) -> str:
        """Insert with a generated id (or data["id"] if present). Returns the id."""
        doc_id = str(data.get("id") or new_id())
        self.set(collection, doc_id, data)
        return doc_id


class InMemoryDocumentStore(DocumentStore):
    """Thread-safe in-process store. Documents are deep-copied in and out."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._collections: dict[str, dict[str, dict]] = {}

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> dict:
        doc = {**copy.deepcopy(data), "id": doc_id}
        with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = doc
        return copy.deepcopy(doc)

    def get(self, collection: str, doc_id: str) -> dict | None:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            if doc is None:
                raise NotFoundError(f"{collection}/{doc_id} not found")
            doc.update(copy.deepcopy(fields))
            doc["id"] = doc_id
            return copy.deepcopy(doc)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._collections.get(collection, {}).pop(doc_id, None) is not None

    def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        where = where or {}
        with self._lock:
            docs = [
                copy.deepcopy(d)
                for d in self._collections.get(collection, {}).values()
                if all(d.get(k) == v for k, v in where.items())
            ]
        if order_by:
            docs.sort(key=lambda d: str(d.get(order_by) or ""), reverse=descending)
        if limit is not None:
            docs = docs[:limit]
        return docs

    def clear(self) -> None:
        with self._lock:
            self._collections.clear()


class PostgresDocumentStore(DocumentStore):
    """JSONB-backed store. Each call borrows a pooled connection."""

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> dict:
        from trip_planner.db.connection import get_conn
        from trip_planner.db.repositories import document_repo

        doc = {**data, "id": doc_id}
        with get_conn() as conn:
            document_repo.insert_document(conn, collection, doc_id, doc)
        return doc

    def get(self, collection: str, doc_id: str) -> dict | None:
        from trip_planner.db.connection import get_conn
        from trip_planner.db.repositories import document_repo

        with get_conn() as conn:
            return document_repo.get_document(conn, collection, doc_id)

    def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict:
        from trip_planner.db.connection import get_conn
        from trip_planner.db.repositories import document_repo

        with get_conn() as conn:
            if not document_repo.merge_document(conn, collection, doc_id, fields):
                raise NotFoundError(f"{collection}/{doc_id} not found")
            return document_repo.get_document(conn, collection, doc_id) or {}

    def delete(self, collection: str, doc_id: str) -> bool:
        from trip_planner.db.connection import get_conn
        from trip_planner.db.repositories import document_repo

        with get_conn() as conn:
            return document_repo.delete_document(conn, collection, doc_id)

    def query(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        from trip_planner.db.connection import get_conn
        from trip_planner.db.repositories import document_repo

        with get_conn() as conn:
            return document_repo.query_documents(
                conn, collection, where, order_by=order_by,
                descending=descending, limit=limit,
            )


# ── Singleton ──────────────────────────────────────────────────────────────────

_store: DocumentStore | None = None
_store_lock = threading.Lock()


def get_store() -> DocumentStore:
    """Return the process-wide store selected by STORE_BACKEND."""
    global _store
    with _store_lock:
        if _store is None:
            if config.STORE_BACKEND == "postgres":
                _store = PostgresDocumentStore()
            else:
                _store = InMemoryDocumentStore()
        return _store


def reset_store(store: DocumentStore | None = None) -> None:
    """Swap the singleton (tests) or drop it so the next get_store() rebuilds."""
    global _store
    with _store_lock:
        _store = store
