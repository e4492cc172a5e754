"""
config.py
---------
Central configuration for the trip planner backend.
All secrets loaded from environment variables, never hard-coded.

A `.env` file next to this package is loaded first; variables already set
in the shell win.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── Server ────────────────────────────────────────────────────────────────────
PORT: int          = int(os.getenv("PORT", "5000"))
FRONTEND_URL: str  = os.getenv("FRONTEND_URL", "http://localhost:3000")
LOG_LEVEL: str     = os.getenv("LOG_LEVEL", "INFO")
# Audit JSONL files (bookings, payments, notifications)
LOGS_DIR: str      = os.getenv("LOGS_DIR", str(Path(__file__).resolve().parent.parent / "logs"))

# Fixed-window rate limit applied to every /api/* route
RATE_LIMIT_MAX_REQUESTS: int   = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"))   # 15 min
# "memory" keeps counters in-process; "redis" shares them across workers
RATE_LIMIT_BACKEND: str        = os.getenv("RATE_LIMIT_BACKEND", "memory")

# ── LLM ──────────────────────────────────────────────────────────────────────
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
LLM_MODEL_NAME: str = os.getenv("LLM_MODEL_NAME", "gemini-1.5-flash")

# Stub mode: no LLM call is made and every service answers with its canned data.
# Set USE_STUB_LLM=false and supply GEMINI_API_KEY to enable real responses.
USE_STUB_LLM: bool = _flag("USE_STUB_LLM", "true")

# ── Google Maps Platform + OpenWeatherMap ─────────────────────────────────────
# Enable: Places API, Directions API, Distance Matrix API, Geocoding API,
#         Elevation API, Time Zone API
GOOGLE_MAPS_API_KEY: str  = os.getenv("GOOGLE_MAPS_API_KEY", "")
GOOGLE_MAPS_BASE_URL: str = os.getenv("GOOGLE_MAPS_BASE_URL", "https://maps.googleapis.com/maps/api")
OPENWEATHER_API_KEY: str  = os.getenv("OPENWEATHER_API_KEY", "")
OPENWEATHER_BASE_URL: str = os.getenv("OPENWEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5")
MAPS_REQUEST_TIMEOUT: int = int(os.getenv("MAPS_REQUEST_TIMEOUT", "15"))

# ── EMT inventory API ─────────────────────────────────────────────────────────
# Bearer auth; the key is also sent as `api_key` in body / query string.
EMT_API_KEY: str          = os.getenv("EMT_API_KEY", "")
EMT_BASE_URL: str         = os.getenv("EMT_BASE_URL", "https://api.emt.com/v1")
EMT_REQUEST_TIMEOUT: int  = int(os.getenv("EMT_REQUEST_TIMEOUT", "30"))

# ── Payments ──────────────────────────────────────────────────────────────────
STRIPE_SECRET_KEY: str      = os.getenv("STRIPE_SECRET_KEY", "")
STRIPE_WEBHOOK_SECRET: str  = os.getenv("STRIPE_WEBHOOK_SECRET", "")
RAZORPAY_KEY_ID: str        = os.getenv("RAZORPAY_KEY_ID", "")
RAZORPAY_KEY_SECRET: str    = os.getenv("RAZORPAY_KEY_SECRET", "")
RAZORPAY_BASE_URL: str      = os.getenv("RAZORPAY_BASE_URL", "https://api.razorpay.com/v1")
PAYPAL_MODE: str            = os.getenv("PAYPAL_MODE", "sandbox")    # sandbox | live
PAYPAL_CLIENT_ID: str       = os.getenv("PAYPAL_CLIENT_ID", "")
PAYPAL_CLIENT_SECRET: str   = os.getenv("PAYPAL_CLIENT_SECRET", "")
PAYMENT_REQUEST_TIMEOUT: int = int(os.getenv("PAYMENT_REQUEST_TIMEOUT", "30"))

# ── Auth ──────────────────────────────────────────────────────────────────────
JWT_SECRET: str           = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM: str        = "HS256"
JWT_EXPIRES_IN: str       = os.getenv("JWT_EXPIRES_IN", "7d")       # <n>d | <n>h | <n>m | <n>s
# Path to the Firebase service-account JSON; empty = application default credentials
FIREBASE_CREDENTIALS: str = os.getenv("FIREBASE_CREDENTIALS", "")
# Web API key used for the Identity Toolkit password sign-in
FIREBASE_WEB_API_KEY: str = os.getenv("FIREBASE_WEB_API_KEY", "")
FIREBASE_AUTH_URL: str    = os.getenv("FIREBASE_AUTH_URL", "https://identitytoolkit.googleapis.com/v1")

# ── Document store ────────────────────────────────────────────────────────────
# "in_memory" | "postgres"
STORE_BACKEND: str = os.getenv("STORE_BACKEND", "in_memory")

# ── PostgreSQL (STORE_BACKEND=postgres) ───────────────────────────────────────
# Schema in trip_planner/db/schema.sql
# Apply with: python -m trip_planner.scripts.run_migrations
POSTGRES_HOST: str     = os.getenv("POSTGRES_HOST",     "localhost")
POSTGRES_PORT: int     = int(os.getenv("POSTGRES_PORT", "5432"))
POSTGRES_DB: str       = os.getenv("POSTGRES_DB",       "trip_planner")
POSTGRES_USER: str     = os.getenv("POSTGRES_USER",     "trip_planner")
POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "trip_planner")
POSTGRES_MIN_CONN: int = int(os.getenv("POSTGRES_MIN_CONN", "1"))
POSTGRES_MAX_CONN: int = int(os.getenv("POSTGRES_MAX_CONN", "10"))

# ── Redis (RATE_LIMIT_BACKEND=redis) ──────────────────────────────────────────
REDIS_HOST: str        = os.getenv("REDIS_HOST",     "localhost")
REDIS_PORT: int        = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB: int          = int(os.getenv("REDIS_DB",   "0"))
REDIS_PASSWORD: str    = os.getenv("REDIS_PASSWORD", "")
REDIS_URL: str         = os.getenv(
    "REDIS_URL",
    f"redis://{':' + REDIS_PASSWORD + '@' if REDIS_PASSWORD else ''}{REDIS_HOST}:{REDIS_PORT}/{REDIS_DB}",
)
