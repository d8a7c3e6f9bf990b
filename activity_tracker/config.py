import os
from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

# Timers
TIMER_TICK_INTERVAL_MS = int(os.getenv("TIMER_TICK_INTERVAL_MS", "100"))
TIMER_SYNC_INTERVAL_SECONDS = float(os.getenv("TIMER_SYNC_INTERVAL_SECONDS", "5"))
TIMER_SESSION_IDLE_SECONDS = float(os.getenv("TIMER_SESSION_IDLE_SECONDS", "1800"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
