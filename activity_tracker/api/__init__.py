# API module exports
from activity_tracker.api import activities, health, timers
from activity_tracker.api.base import api_router

__all__ = ["activities", "health", "timers", "api_router"]
