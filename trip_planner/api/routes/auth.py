"""
api/routes/auth.py
------------------
    POST /api/auth/register
    POST /api/auth/login
    GET  /api/auth/profile
    PUT  /api/auth/profile
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from trip_planner.api.deps import require_user
from trip_planner.auth import AuthUser, create_firebase_user, issue_token, sign_in_with_password
from trip_planner.db import get_store, now_iso
from trip_planner.errors import AuthError

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    preferences: Optional[dict] = None


@router.post("/register", summary="Create an account")
def register(req: RegisterRequest) -> dict:
    try:
        record = create_firebase_user(req.email, req.password, req.name, req.phone)
    except Exception as exc:
        logger.warning("Registration failed for %s: %s", req.email, exc)
        raise HTTPException(status_code=400, detail=f"Registration failed: {exc}") from exc

    get_store().set("users", record.uid, {
        "email": req.email,
        "name": req.name,
        "phone": req.phone,
        "createdAt": now_iso(),
        "preferences": {},
        "tripHistory": [],
    })
    return {
        "success": True,
        "user": {"id": record.uid, "email": record.email, "name": record.display_name},
        "token": issue_token(record.uid, record.email, record.display_name),
    }


@router.post("/login", summary="Exchange email + password for a token")
def login(req: LoginRequest) -> dict:
    try:
        session = sign_in_with_password(req.email, req.password)
    except AuthError as exc:
        raise HTTPException(status_code=401, detail="Invalid credentials") from exc

    uid = session["localId"]
    profile = get_store().get("users", uid) or {}
    name = profile.get("name") or session.get("displayName")
    return {
        "success": True,
        "user": {"id": uid, "email": session.get("email", req.email), "name": name},
        "token": issue_token(uid, session.get("email", req.email), name),
    }


@router.get("/profile", summary="Caller's profile")
def get_profile(user: AuthUser = Depends(require_user)) -> dict:
    profile = get_store().get("users", user.id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "user": profile}


@router.put("/profile", summary="Update name, phone or preferences")
def update_profile(req: ProfileUpdate, user: AuthUser = Depends(require_user)) -> dict:
    if get_store().get("users", user.id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    fields = req.model_dump(exclude_none=True)
    get_store().update("users", user.id, {**fields, "updatedAt": now_iso()})
    return {"success": True, "message": "Profile updated successfully"}
