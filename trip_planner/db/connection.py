"""
db/connection.py
-----------------
Pooled Postgres access for the document store (STORE_BACKEND=postgres).

    with get_conn() as conn:
        document_repo.insert_document(conn, "bookings", booking_id, doc)

Each `get_conn()` block is one transaction.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterator

import psycopg2.extensions
from psycopg2.pool import ThreadedConnectionPool

from trip_planner import config

_pool: ThreadedConnectionPool | None = None
_pool_lock = threading.Lock()


def connect_kwargs() -> dict[str, Any]:
    """psycopg2 keyword arguments for the configured database."""
    return {
        "host": config.POSTGRES_HOST,
        "port": config.POSTGRES_PORT,
        "dbname": config.POSTGRES_DB,
        "user": config.POSTGRES_USER,
        "password": config.POSTGRES_PASSWORD,
        "application_name": "trip_planner",
    }


def get_pool() -> ThreadedConnectionPool:
    global _pool
    with _pool_lock:
        if _pool is None or _pool.closed:
            _pool = ThreadedConnectionPool(
                config.POSTGRES_MIN_CONN,
                config.POSTGRES_MAX_CONN,
                **connect_kwargs(),
            )
        return _pool


@contextmanager
def get_conn() -> Iterator[psycopg2.extensions.connection]:
    pool = get_pool()
    conn = pool.getconn()
    try:
        yield conn
        conn.commit()
    except BaseException:
        if not conn.closed:
            conn.rollback()
        raise
    finally:
        # A dead connection is discarded instead of going back to the pool
        pool.putconn(conn, close=bool(conn.closed))


def close_pool() -> None:
    """Drop every pooled connection; the next get_conn() rebuilds the pool."""
    global _pool
    with _pool_lock:
        if _pool is not None and not _pool.closed:
            _pool.closeall()
        _pool = None
