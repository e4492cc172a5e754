"""
api/deps.py
-----------
FastAPI dependencies for caller identity.

    require_user    401 "Access token required" / 401 "Token expired" / 403 "Invalid token"
    optional_user   AuthUser or None, never raises
    require_role    401 when anonymous, 403 when the users/{id}.role check fails
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request

from trip_planner.auth import AuthUser, TokenExpiredError, resolve_user
from trip_planner.db import get_store
from trip_planner.errors import TripPlannerError

logger = logging.getLogger(__name__)

DEMO_USER_ID = "demo-user"


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_user(request: Request) -> AuthUser:
    token = bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Access token required")
    try:
        user = resolve_user(token)
    except TokenExpiredError:
        raise HTTPException(status_code=401, detail="Token expired")
    except TripPlannerError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(status_code=403, detail="Invalid token")
    request.state.user = user
    return user


def optional_user(request: Request) -> Optional[AuthUser]:
    token = bearer_token(request)
    if not token:
        return None
    try:
        user = resolve_user(token)
    except TripPlannerError:
        return None
    request.state.user = user
    return user


def require_role(*roles: str):
    """Dependency factory: the caller's users/{id}.role (str or list) must hit one of `roles`."""

    def _check(user: Optional[AuthUser] = Depends(optional_user)) -> AuthUser:
        if user is None:
            raise HTTPException(status_code=401, detail="Authentication required")
        profile = get_store().get("users", user.id) or {}
        role = profile.get("role")
        if not role:
            raise HTTPException(status_code=403, detail="User role not found")
        user_roles = role if isinstance(role, list) else [role]
        if not any(r in user_roles for r in roles):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return _check
