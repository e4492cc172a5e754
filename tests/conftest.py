import os

# Must be set before trip_planner.config is imported
os.environ["USE_STUB_LLM"] = "true"
os.environ["STORE_BACKEND"] = "in_memory"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "10000"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["FIREBASE_CREDENTIALS"] = ""
os.environ["FIREBASE_WEB_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from trip_planner.api.deps import require_user
from trip_planner.api.server import app, limiter
from trip_planner.auth import AuthUser
from trip_planner.db import reset_store
from trip_planner.db.document_store import InMemoryDocumentStore
from trip_planner.modules.observability.logger import StructuredLogger, set_audit_logger

TEST_USER = AuthUser(id="user-1", email="traveller@example.com", name="Test Traveller")


@pytest.fixture(autouse=True)
def store():
    s = InMemoryDocumentStore()
    reset_store(s)
    yield s
    reset_store()


@pytest.fixture(autouse=True)
def audit(tmp_path):
    logger = StructuredLogger(tmp_path / "logs")
    set_audit_logger(logger)
    yield logger
    set_audit_logger(None)


@pytest.fixture
def anon_client():
    limiter.reset()
    app.dependency_overrides.clear()
    with TestClient(app) as c:
        yield c


@pytest.fixture
def client():
    limiter.reset()
    app.dependency_overrides[require_user] = lambda: TEST_USER
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def trip_doc():
    """A small stored-itinerary document owned by TEST_USER."""
    return {
        "userId": TEST_USER.id,
        "params": {"destination": "Goa", "duration": 2, "budget": 20000, "interests": ["beach"], "groupSize": 2},
        "itinerary": {
            "days": [
                {
                    "day": 1,
                    "date": "2026-12-01",
                    "activities": [
                        {"time": "09:00", "activity": "Nature walk at Fort Aguada", "bookingRequired": True, "cost": "₹1,200"},
                        {"time": "15:00", "activity": "Visit a heritage museum", "bookingRequired": False},
                    ],
                    "meals": [{"type": "lunch", "cuisine": "Local Goan", "restaurant": "Shack"}],
                    "transportation": {"mode": "bus", "distance": "20 km"},
                },
            ],
        },
        "bookingInfo": {
            "accommodations": [{"name": "Beach Eco Lodge", "type": "eco_lodge", "cost": "₹4,500", "guests": 2}],
        },
        "status": "generated",
        "createdAt": "2026-11-01T10:00:00+00:00",
    }
