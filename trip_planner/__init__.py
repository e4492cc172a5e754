"""AI trip planner backend: itinerary generation, bookings, payments and travel services."""

__version__ = "1.0.0"
