from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import patch

import jwt
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from trip_planner import config
from trip_planner.api.deps import require_role
from trip_planner.auth import (
    AuthUser,
    TokenExpiredError,
    decode_token,
    issue_token,
    parse_expires_in,
    resolve_user,
)
from trip_planner.errors import AuthError


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def _expired_token(uid="user-1"):
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    payload = {"uid": uid, "iat": past, "exp": past + timedelta(hours=1)}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


@pytest.mark.parametrize("value, seconds", [("7d", 7 * 86400), ("12h", 43200), ("30m", 1800), ("45s", 45), ("90", 90)])
def test_parse_expires_in(value, seconds):
    assert parse_expires_in(value) == timedelta(seconds=seconds)


def test_parse_expires_in_rejects_garbage():
    with pytest.raises(ValueError):
        parse_expires_in("soon")


def test_token_roundtrip_claims():
    claims = decode_token(issue_token("user-9", "a@example.com", "Asha"))
    assert claims["uid"] == "user-9"
    assert claims["email"] == "a@example.com"
    assert claims["name"] == "Asha"
    assert claims["exp"] - claims["iat"] == 7 * 86400


def test_decode_expired_and_tampered():
    with pytest.raises(TokenExpiredError):
        decode_token(_expired_token())
    forged = jwt.encode({"uid": "x"}, "other-secret", algorithm="HS256")
    with pytest.raises(AuthError):
        decode_token(forged)


def test_resolve_user_without_firebase_rejects_unknown_tokens():
    assert resolve_user(issue_token("u1", None)) == AuthUser(id="u1")
    with pytest.raises(AuthError):
        resolve_user("not-a-jwt")


def test_resolve_user_falls_back_to_firebase():
    claims = {"uid": "fb-1", "email": "f@example.com", "picture": "https://img"}
    with patch("trip_planner.auth.verify_firebase_token", return_value=claims):
        user = resolve_user("firebase-id-token")
    assert user.id == "fb-1"
    assert user.picture == "https://img"


# ── HTTP ──────────────────────────────────────────────────────────────────────

def test_missing_token_is_401(anon_client):
    resp = anon_client.get("/api/booking/my-bookings")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Access token required"


def test_invalid_token_is_403(anon_client):
    resp = anon_client.get("/api/booking/my-bookings", headers=_auth("garbage"))
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Invalid token"


def test_expired_token_is_401(anon_client):
    resp = anon_client.get("/api/booking/my-bookings", headers=_auth(_expired_token()))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


def test_register_then_profile(anon_client, store):
    record = SimpleNamespace(uid="fb-42", email="new@example.com", display_name="New Traveller")
    with patch("trip_planner.api.routes.auth.create_firebase_user", return_value=record):
        resp = anon_client.post("/api/auth/register", json={
            "email": "new@example.com", "password": "secret123", "name": "New Traveller",
        })
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"] == {"id": "fb-42", "email": "new@example.com", "name": "New Traveller"}
    assert store.get("users", "fb-42")["tripHistory"] == []

    profile = anon_client.get("/api/auth/profile", headers=_auth(body["token"]))
    assert profile.json()["user"]["email"] == "new@example.com"

    updated = anon_client.put("/api/auth/profile", headers=_auth(body["token"]), json={"phone": "+919800000000"})
    assert updated.status_code == 200
    assert store.get("users", "fb-42")["phone"] == "+919800000000"
    assert store.get("users", "fb-42")["name"] == "New Traveller"


def test_register_failure_is_400(anon_client):
    with patch("trip_planner.api.routes.auth.create_firebase_user", side_effect=ValueError("email exists")):
        resp = anon_client.post("/api/auth/register", json={"email": "a@example.com", "password": "pw"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Registration failed: email exists"


def test_login(anon_client, store):
    store.set("users", "fb-7", {"email": "seven@example.com", "name": "Stored Name"})
    session = {"localId": "fb-7", "email": "seven@example.com", "displayName": "Firebase Name"}
    with patch("trip_planner.api.routes.auth.sign_in_with_password", return_value=session):
        resp = anon_client.post("/api/auth/login", json={"email": "seven@example.com", "password": "pw"})
    body = resp.json()
    assert body["user"]["name"] == "Stored Name"
    assert decode_token(body["token"])["uid"] == "fb-7"


def test_login_bad_credentials(anon_client):
    # no FIREBASE_WEB_API_KEY in tests, so every password check fails
    resp = anon_client.post("/api/auth/login", json={"email": "x@example.com", "password": "pw"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


def test_profile_missing_user(client):
    assert client.get("/api/auth/profile").status_code == 404


# ── roles ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def admin_client():
    app = FastAPI()

    @app.get("/admin")
    def admin(user: AuthUser = Depends(require_role("admin"))):
        return {"id": user.id}

    return TestClient(app)


def test_require_role(admin_client, store):
    assert admin_client.get("/admin").status_code == 401

    store.set("users", "plain", {"email": "p@example.com"})
    assert admin_client.get("/admin", headers=_auth(issue_token("plain", None))).json()["detail"] == "User role not found"

    store.set("users", "guide", {"role": ["guide"]})
    assert admin_client.get("/admin", headers=_auth(issue_token("guide", None))).json()["detail"] == "Insufficient permissions"

    store.set("users", "boss", {"role": ["guide", "admin"]})
    assert admin_client.get("/admin", headers=_auth(issue_token("boss", None))).json() == {"id": "boss"}
