import logging
from contextlib import asynccontextmanager

from activity_tracker import config

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from activity_tracker.api.base import api_router  # noqa: E402
from activity_tracker.services.timers import SessionRegistry, create_supabase_session  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.timer_sessions = SessionRegistry(
        create_supabase_session, idle_timeout=config.TIMER_SESSION_IDLE_SECONDS
    )
    app.state.timer_sessions.start()
    try:
        yield
    finally:
        # Tick loops and realtime subscriptions must not outlive the process
        await app.state.timer_sessions.close_all()
        logger.info("All timer sessions closed")


app = FastAPI(
    title="Activity Tracker API",
    description="Concurrent activity timers synchronized through Supabase",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Specify your frontend URL in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "Activity Tracker API",
        "docs": "/docs",
        "version": "1.0.0"
    }
