"""
auth.py
-------
Identity for API callers.

Two kinds of bearer token are accepted:
  - application JWTs (HS256, PyJWT) issued by /api/auth/register and /login
  - Firebase ID tokens issued to the web client by Firebase Auth

`resolve_user` tries the application JWT first and falls back to Firebase.
Firebase Admin is initialised lazily from FIREBASE_CREDENTIALS so the
process starts (and tests run) without a service account.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone

import firebase_admin
import jwt
import requests
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

from trip_planner import config
from trip_planner.errors import AuthError

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([dhms]?)\s*$")
_UNIT_SECONDS = {"d": 86400, "h": 3600, "m": 60, "s": 1, "": 1}

_firebase_lock = threading.Lock()


class TokenExpiredError(AuthError):
    pass


@dataclass
class AuthUser:
    id: str
    email: str | None = None
    name: str | None = None
    picture: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def parse_expires_in(value: str) -> timedelta:
    """'7d' -> 7 days; '12h', '30m', '45s' and bare seconds are accepted."""
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid JWT_EXPIRES_IN value: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit])


# ── application JWT ────────────────────────────────────────────────────────────

def issue_token(uid: str, email: str | None, name: str | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "uid": uid,
        "email": email,
        "iat": now,
        "exp": now + parse_expires_in(config.JWT_EXPIRES_IN),
    }
    if name:
        payload["name"] = name
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid token") from exc


# ── Firebase ───────────────────────────────────────────────────────────────────

def firebase_app() -> firebase_admin.App:
    with _firebase_lock:
        try:
            return firebase_admin.get_app()
        except ValueError:
            if not config.FIREBASE_CREDENTIALS:
                raise AuthError("Firebase is not configured") from None
            cred = credentials.Certificate(config.FIREBASE_CREDENTIALS)
            return firebase_admin.initialize_app(cred)


def verify_firebase_token(token: str) -> dict:
    app = firebase_app()
    try:
        return firebase_auth.verify_id_token(token, app=app)
    except firebase_auth.ExpiredIdTokenError as exc:
        raise TokenExpiredError("Token expired") from exc
    except Exception as exc:
        raise AuthError("Invalid token") from exc


def create_firebase_user(email: str, password: str, name: str | None = None, phone: str | None = None):
    kwargs = {"email": email, "password": password}
    if name:
        kwargs["display_name"] = name
    if phone:
        kwargs["phone_number"] = phone
    return firebase_auth.create_user(app=firebase_app(), **kwargs)


def sign_in_with_password(email: str, password: str) -> dict:
    """Check credentials with the Identity Toolkit REST API; returns its JSON body."""
    if not config.FIREBASE_WEB_API_KEY:
        raise AuthError("Invalid credentials")
    try:
        resp = requests.post(
            f"{config.FIREBASE_AUTH_URL.rstrip('/')}/accounts:signInWithPassword",
            params={"key": config.FIREBASE_WEB_API_KEY},
            json={"email": email, "password": password, "returnSecureToken": True},
            timeout=config.MAPS_REQUEST_TIMEOUT,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Password sign-in failed for %s: %s", email, exc)
        raise AuthError("Invalid credentials") from exc
    return resp.json()


# ── resolution ─────────────────────────────────────────────────────────────────

def resolve_user(token: str) -> AuthUser:
    try:
        claims = decode_token(token)
        return AuthUser(id=claims["uid"], email=claims.get("email"), name=claims.get("name"))
    except TokenExpiredError:
        raise
    except AuthError:
        pass

    claims = verify_firebase_token(token)
    return AuthUser(
        id=claims["uid"],
        email=claims.get("email"),
        name=claims.get("name"),
        picture=claims.get("picture"),
    )
