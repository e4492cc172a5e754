"""
api/routes/health.py
--------------------
GET /api/health: liveness plus which backends this process is wired to.

`store` and `rateLimit` echo STORE_BACKEND / RATE_LIMIT_BACKEND; `llm` is
"gemini" only when real completions are enabled, "stub" when every
generator answers from its canned fallback. Nothing here touches the
network, so the route stays cheap enough for load-balancer health checks.
"""
from __future__ import annotations

from fastapi import APIRouter

from trip_planner import config
from trip_planner.db import now_iso
from trip_planner.llm import llm_enabled

router = APIRouter()


@router.get("/health", summary="Health check")
def health() -> dict:
    return {
        "status": "OK",
        "message": "AI Trip Planner API is running",
        "timestamp": now_iso(),
        "store": config.STORE_BACKEND,
        "llm": "gemini" if llm_enabled() else "stub",
        "rateLimit": config.RATE_LIMIT_BACKEND,
    }
