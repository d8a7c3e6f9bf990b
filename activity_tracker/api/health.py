"""Health check endpoints"""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/")
async def health_check(request: Request):
    """Basic health check endpoint"""
    registry = getattr(request.app.state, "timer_sessions", None)
    return {
        "status": "healthy",
        "service": "activity-tracker",
        "active_sessions": len(registry) if registry is not None else 0,
    }
