from fastapi import APIRouter
from activity_tracker.api import activities, health, timers

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(timers.router)
api_router.include_router(activities.router)
api_router.include_router(health.router)
