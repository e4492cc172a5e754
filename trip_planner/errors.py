"""
errors.py
---------
Domain exceptions. Each carries the HTTP status the API layer maps it to.
"""

from __future__ import annotations


class TripPlannerError(Exception):
    status_code: int = 500

    def __init__(self, message: str = "", *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(TripPlannerError):
    status_code = 400


class PaymentError(TripPlannerError):
    status_code = 400


class AuthError(TripPlannerError):
    status_code = 401


class ForbiddenError(TripPlannerError):
    status_code = 403


class NotFoundError(TripPlannerError):
    status_code = 404


class UpstreamError(TripPlannerError):
    """A third-party API answered with something unusable."""
    status_code = 502


class LLMUnavailableError(TripPlannerError):
    """Stub mode is on or no API key is configured."""
    status_code = 503
