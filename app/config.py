import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./laundry.db")

# Hosted backend (Supabase REST). When unset, time slots are read from DATABASE_URL.
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
TIME_SLOTS_TABLE = os.getenv("TIME_SLOTS_TABLE", "time_slots")
SLOT_FETCH_TIMEOUT = float(os.getenv("SLOT_FETCH_TIMEOUT", "10"))

# "Today" is computed once per scheduling session in this zone
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "America/New_York")

# Trailing debounce window for publishing draft changes outward
DRAFT_PUBLISH_DEBOUNCE_MS = int(os.getenv("DRAFT_PUBLISH_DEBOUNCE_MS", "100"))

# Redis cache for the slot catalogue (0 disables)
REDIS_URL = os.getenv("REDIS_URL")
SLOT_CACHE_TTL = int(os.getenv("SLOT_CACHE_TTL", "300"))

# Frontend origins allowed to call the API
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", FRONTEND_URL).split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Scheduling sessions idle longer than this are discarded (0 keeps them until ended)
SCHEDULING_SESSION_TTL = int(os.getenv("SCHEDULING_SESSION_TTL", "1800"))
