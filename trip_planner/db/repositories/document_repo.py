"""
db/repositories/document_repo.py
---------------------------------
SQL for the `documents` table (trip_planner/db/schema.sql).

All functions accept a psycopg2 connection object.
Commit/rollback is managed by the caller via db.connection.get_conn().
"""

from __future__ import annotations

import json
from typing import Any


def insert_document(conn, collection: str, doc_id: str, data: dict[str, Any]) -> str:
    """Insert or replace one document. Returns doc_id."""
    sql = """
        INSERT INTO documents (collection, doc_id, data)
        VALUES (%(collection)s, %(doc_id)s, %(data)s::jsonb)
        ON CONFLICT (collection, doc_id)
        DO UPDATE SET data = EXCLUDED.data, updated_at = now()
        RETURNING doc_id
    """
    with conn.cursor() as cur:
        cur.execute(sql, {
            "collection": collection,
            "doc_id":     doc_id,
            "data":       json.dumps(data, default=str),
        })
        return str(cur.fetchone()[0])


def get_document(conn, collection: str, doc_id: str) -> dict | None:
    sql = "SELECT data FROM documents WHERE collection = %s AND doc_id = %s"
    with conn.cursor() as cur:
        cur.execute(sql, (collection, doc_id))
        row = cur.fetchone()
    return row[0] if row else None


def merge_document(conn, collection: str, doc_id: str, fields: dict[str, Any]) -> bool:
    """Shallow-merge `fields` into the stored document. Returns False if it does not exist."""
    sql = """
        UPDATE documents
        SET data = data || %(fields)s::jsonb, updated_at = now()
        WHERE collection = %(collection)s AND doc_id = %(doc_id)s
    """
    with conn.cursor() as cur:
        cur.execute(sql, {
            "collection": collection,
            "doc_id":     doc_id,
            "fields":     json.dumps(fields, default=str),
        })
        return cur.rowcount > 0


def delete_document(conn, collection: str, doc_id: str) -> bool:
    sql = "DELETE FROM documents WHERE collection = %s AND doc_id = %s"
    with conn.cursor() as cur:
        cur.execute(sql, (collection, doc_id))
        return cur.rowcount > 0


def query_documents(
    conn,
    collection: str,
    where: dict[str, Any] | None = None,
    order_by: str | None = None,
    descending: bool = False,
    limit: int | None = None,
) -> list[dict]:
    """
    Equality filter via JSONB containment (`data @> where`), optional ordering
    on a top-level text field.
    """
    params: dict[str, Any] = {
        "collection": collection,
        "where":      json.dumps(where or {}, default=str),
    }
    sql = "SELECT data FROM documents WHERE collection = %(collection)s AND data @> %(where)s::jsonb"
    if order_by:
        params["order_by"] = order_by
        sql += " ORDER BY data->>%(order_by)s " + ("DESC" if descending else "ASC")
    if limit is not None:
        params["limit"] = int(limit)
        sql += " LIMIT %(limit)s"
    with conn.cursor() as cur:
        cur.execute(sql, params)
        return [row[0] for row in cur.fetchall()]
