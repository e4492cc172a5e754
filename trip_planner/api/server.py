"""
api/server.py
-------------
FastAPI application entry point.

Run dev server:
    uvicorn trip_planner.api.server:app --reload --port 5000

Routers (all under /api):
    /health                 health check
    /auth                   register, login, profile
    /ai, /social            itinerary generation and adjustment, social templates
    /trips                  saved itineraries
    /maps                   places, directions, weather
    /booking, /bookings     itinerary booking
    /payment                Stripe / PayPal / Razorpay
    /multilingual, /ar, /voice
    /sustainability, /analytics, /emt
    /send-confirmation-email, /send-sms
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from trip_planner import config
from trip_planner.api.rate_limit import limiter, rate_limit_exceeded_handler
from trip_planner.api.routes import (
    ai,
    analytics,
    ar,
    auth,
    booking,
    emt,
    health,
    maps,
    multilingual,
    notifications,
    payment,
    sustainability,
    trips,
    voice,
)
from trip_planner.errors import TripPlannerError
from trip_planner.modules.observability.logger import configure_logging, get_audit_logger

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    get_audit_logger().close()
    if config.STORE_BACKEND == "postgres":
        from trip_planner.db.connection import close_pool
        close_pool()


app = FastAPI(
    lifespan=lifespan,
    title="AI Trip Planner API",
    version="1.0.0",
    description=(
        "Personalised trip planning backend. Integrates Gemini, Google Maps, "
        "OpenWeatherMap, EaseMyTrip inventory and Stripe / PayPal / Razorpay."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "no-referrer"
    return response


app.add_middleware(GZipMiddleware, minimum_size=1000)
# Outermost, so 429s and error responses carry CORS headers too
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TripPlannerError)
async def trip_planner_error_handler(request: Request, exc: TripPlannerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "message": exc.message},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Something went wrong!", "message": "Internal server error"},
    )


app.include_router(health.router,          prefix="/api",                tags=["Health"])
app.include_router(auth.router,            prefix="/api/auth",           tags=["Auth"])
app.include_router(ai.router,              prefix="/api/ai",             tags=["AI"])
app.include_router(ai.social_router,       prefix="/api/social",         tags=["AI"])
app.include_router(trips.router,           prefix="/api/trips",          tags=["Trips"])
app.include_router(maps.router,            prefix="/api/maps",           tags=["Maps"])
app.include_router(booking.router,         prefix="/api/booking",        tags=["Booking"])
app.include_router(booking.bookings_router, prefix="/api",               tags=["Booking"])
app.include_router(payment.router,         prefix="/api/payment",        tags=["Payment"])
app.include_router(multilingual.router,    prefix="/api/multilingual",   tags=["Multilingual"])
app.include_router(ar.router,              prefix="/api/ar",             tags=["AR"])
app.include_router(voice.router,           prefix="/api/voice",          tags=["Voice"])
app.include_router(sustainability.router,  prefix="/api/sustainability", tags=["Sustainability"])
app.include_router(analytics.router,       prefix="/api/analytics",      tags=["Analytics"])
app.include_router(emt.router,             prefix="/api/emt",            tags=["EMT"])
app.include_router(notifications.router,   prefix="/api",                tags=["Notifications"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("trip_planner.api.server:app", host="0.0.0.0", port=config.PORT)
