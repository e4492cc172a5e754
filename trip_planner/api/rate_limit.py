"""
api/rate_limit.py
-----------------
slowapi limiter shared by every /api/* route.

Requests are keyed by the application-JWT uid when the bearer token
decodes, the client IP otherwise. With RATE_LIMIT_BACKEND=redis the
counters live at REDIS_URL so all workers share one window; if Redis is
unreachable slowapi counts in process until it comes back.
"""
from __future__ import annotations

import math
import time

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from trip_planner import config
from trip_planner.api.deps import bearer_token
from trip_planner.auth import decode_token
from trip_planner.errors import TripPlannerError


def request_identity(request: Request) -> str:
    token = bearer_token(request)
    if token:
        try:
            return f"user:{decode_token(token)['uid']}"
        except (TripPlannerError, KeyError):
            pass
    return f"ip:{request.client.host if request.client else 'unknown'}"


def api_limit() -> str:
    # Read per request so RATE_LIMIT_* changes apply without a restart
    return f"{config.RATE_LIMIT_MAX_REQUESTS} per {config.RATE_LIMIT_WINDOW_SECONDS} seconds"


def storage_uri() -> str:
    return config.REDIS_URL if config.RATE_LIMIT_BACKEND == "redis" else "memory://"


limiter = Limiter(
    key_func=request_identity,
    default_limits=[api_limit],
    storage_uri=storage_uri(),
    strategy="fixed-window",
    in_memory_fallback_enabled=True,
)


def retry_after_seconds(request: Request, exc: RateLimitExceeded) -> int:
    """Seconds until the exceeded window resets."""
    view_limit = getattr(request.state, "view_rate_limit", None)
    if not view_limit:
        return exc.limit.limit.get_expiry()
    item, keys = view_limit
    reset_at, _ = request.app.state.limiter.limiter.get_window_stats(item, *keys)
    return max(1, math.ceil(reset_at - time.time()))


# slowapi's middleware calls this handler synchronously
def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    retry_after = retry_after_seconds(request, exc)
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests", "retryAfter": retry_after},
        headers={"Retry-After": str(retry_after)},
    )
