import json
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from trip_planner import config
from trip_planner.api import rate_limit
from trip_planner.db.document_store import PostgresDocumentStore
from trip_planner.db.repositories import document_repo
from trip_planner.errors import NotFoundError


@pytest.fixture
def conn():
    connection = MagicMock()
    cursor = connection.cursor.return_value.__enter__.return_value
    return connection, cursor


@pytest.fixture
def pooled(conn):
    connection, _ = conn

    @contextmanager
    def fake_get_conn():
        yield connection

    with patch("trip_planner.db.connection.get_conn", fake_get_conn):
        yield conn


# ── document_repo SQL ─────────────────────────────────────────────────────────

def test_insert_serialises_jsonb(conn):
    connection, cursor = conn
    cursor.fetchone.return_value = ("doc-1",)
    assert document_repo.insert_document(connection, "bookings", "doc-1", {"total": 5700}) == "doc-1"
    params = cursor.execute.call_args.args[1]
    assert json.loads(params["data"]) == {"total": 5700}
    assert "ON CONFLICT (collection, doc_id)" in cursor.execute.call_args.args[0]


def test_query_builds_order_and_limit(conn):
    connection, cursor = conn
    cursor.fetchall.return_value = [({"id": "a"},), ({"id": "b"},)]
    rows = document_repo.query_documents(
        connection, "itineraries", {"userId": "user-1"}, order_by="createdAt", descending=True, limit=5,
    )
    sql, params = cursor.execute.call_args.args
    assert rows == [{"id": "a"}, {"id": "b"}]
    assert sql.endswith("ORDER BY data->>%(order_by)s DESC LIMIT %(limit)s")
    assert json.loads(params["where"]) == {"userId": "user-1"}
    assert params["limit"] == 5


def test_query_without_filters(conn):
    connection, cursor = conn
    cursor.fetchall.return_value = []
    document_repo.query_documents(connection, "users")
    sql, params = cursor.execute.call_args.args
    assert "ORDER BY" not in sql
    assert params["where"] == "{}"


# ── PostgresDocumentStore ─────────────────────────────────────────────────────

def test_postgres_store_set_adds_id(pooled):
    _, cursor = pooled
    cursor.fetchone.return_value = ("pay_1",)
    doc = PostgresDocumentStore().set("payments", "pay_1", {"status": "completed"})
    assert doc == {"status": "completed", "id": "pay_1"}


def test_postgres_store_update_missing_raises(pooled):
    _, cursor = pooled
    cursor.rowcount = 0
    with pytest.raises(NotFoundError):
        PostgresDocumentStore().update("bookings", "nope", {"status": "cancelled"})


def test_postgres_store_get(pooled):
    _, cursor = pooled
    cursor.fetchone.return_value = ({"id": "u1", "email": "a@example.com"},)
    assert PostgresDocumentStore().get("users", "u1")["email"] == "a@example.com"


# ── Rate limit configuration ──────────────────────────────────────────────────

def test_limiter_storage_follows_backend(monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_BACKEND", "memory")
    assert rate_limit.storage_uri() == "memory://"
    monkeypatch.setattr(config, "RATE_LIMIT_BACKEND", "redis")
    monkeypatch.setattr(config, "REDIS_URL", "redis://cache:6379/2")
    assert rate_limit.storage_uri() == "redis://cache:6379/2"


def test_limit_string_reads_config_per_call(monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_MAX_REQUESTS", 0)
    monkeypatch.setattr(config, "RATE_LIMIT_WINDOW_SECONDS", 60)
    assert rate_limit.api_limit() == "0 per 60 seconds"


def test_identity_prefers_token_uid():
    from trip_planner.auth import issue_token

    token = issue_token("user-9", "u9@example.com")
    request = MagicMock()
    request.headers = {"authorization": f"Bearer {token}"}
    assert rate_limit.request_identity(request) == "user:user-9"

    request.headers = {"authorization": "Bearer not-a-jwt"}
    request.client.host = "10.0.0.7"
    assert rate_limit.request_identity(request) == "ip:10.0.0.7"


# ── Migrations ────────────────────────────────────────────────────────────────

def test_schema_statements_exclude_comments():
    from trip_planner.scripts.run_migrations import load_statements

    statements = load_statements()
    assert len(statements) == 3
    assert statements[0].startswith("CREATE TABLE IF NOT EXISTS documents")
    assert all("--" not in s for s in statements)


def test_dry_run_prints_without_connecting(capsys):
    from trip_planner.scripts import run_migrations

    with patch.object(run_migrations.psycopg2, "connect") as connect:
        run_migrations.main(["--dry-run"])
    connect.assert_not_called()
    assert "CREATE INDEX IF NOT EXISTS idx_documents_user" in capsys.readouterr().out


def test_migration_failure_exits_with_1():
    import psycopg2
    from trip_planner.scripts import run_migrations

    with patch.object(run_migrations, "apply", side_effect=psycopg2.OperationalError("refused")):
        with pytest.raises(SystemExit) as exc_info:
            run_migrations.main([])
    assert exc_info.value.code == 1
