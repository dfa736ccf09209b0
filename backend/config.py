"""
config.py
---------
Central configuration for the micro-adventure planner.
All secrets loaded from environment variables — never hard-coded.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the backend directory (if it exists) so env vars in that file
# are picked up by os.getenv() below.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=True)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── Google Maps Platform ─────────────────────────────────────────────────────
# One key serves both capabilities.
# Enable:  Places API (New)  +  Routes API
# Set env: GOOGLE_MAPS_API_KEY=AIza...
GOOGLE_MAPS_API_KEY: str = os.getenv("GOOGLE_MAPS_API_KEY", "")

# Stub flags: each capability can be toggled independently.
# Stub places serve a small hardcoded dataset; stub routing means no routing
# capability at all, so every leg is a geometric estimate.
USE_STUB_PLACES:  bool = _flag("USE_STUB_PLACES",  "true")
USE_STUB_ROUTING: bool = _flag("USE_STUB_ROUTING", "true")

PLACES_MAX_RESULTS:      int   = int(os.getenv("PLACES_MAX_RESULTS", "20"))
PLACES_REQUEST_TIMEOUT:  float = float(os.getenv("PLACES_REQUEST_TIMEOUT", "10"))
ROUTING_REQUEST_TIMEOUT: float = float(os.getenv("ROUTING_REQUEST_TIMEOUT", "10"))

# Modes the routing capability answers natively; anything else is derived
# from the walking route.
ROUTING_NATIVE_MODES: frozenset[str] = frozenset(
    m.strip() for m in os.getenv("ROUTING_NATIVE_MODES", "walking,driving").split(",") if m.strip()
)
TRANSIT_SPEEDUP_FACTOR: float = float(os.getenv("TRANSIT_SPEEDUP_FACTOR", "0.5"))

# ── Per-mode profile (single canonical table) ─────────────────────────────────
#   speed_kmh             : fallback travel-time estimate
#   search_m_per_hour     : candidate search radius per hour of outing
#   fallback_spacing_deg  : radial spacing of synthetic stops per index
MODE_PROFILES: dict[str, dict[str, float]] = {
    "walking": {"speed_kmh":  5.0, "search_m_per_hour": 2000.0, "fallback_spacing_deg": 0.003},
    "transit": {"speed_kmh": 20.0, "search_m_per_hour": 5000.0, "fallback_spacing_deg": 0.007},
    "driving": {"speed_kmh": 30.0, "search_m_per_hour": 8000.0, "fallback_spacing_deg": 0.010},
}

# ── Planning rules ────────────────────────────────────────────────────────────
MIN_MINUTES_PER_STOP: int   = int(os.getenv("MIN_MINUTES_PER_STOP", "10"))
MAX_CANDIDATES:       int   = int(os.getenv("MAX_CANDIDATES", "15"))
SEARCH_RADIUS_MIN_M:  float = float(os.getenv("SEARCH_RADIUS_MIN_M", "2000"))
SEARCH_RADIUS_MAX_M:  float = float(os.getenv("SEARCH_RADIUS_MAX_M", "15000"))
MAX_DURATION_HOURS:   float = float(os.getenv("MAX_DURATION_HOURS", "24"))

# Bounded pool for independent external calls (category searches, leg lookups).
# 1 = strictly sequential.
PLANNER_MAX_WORKERS: int = int(os.getenv("PLANNER_MAX_WORKERS", "4"))

# ── Cache ─────────────────────────────────────────────────────────────────────
CACHE_BACKEND: str = os.getenv("CACHE_BACKEND", "memory")    # "memory" | "redis"
# TTLs (seconds); travel time is valid anywhere in 1–24 h
TRAVEL_TIME_CACHE_TTL:  int = int(os.getenv("TRAVEL_TIME_CACHE_TTL",  "3600"))
PLACE_SEARCH_CACHE_TTL: int = int(os.getenv("PLACE_SEARCH_CACHE_TTL", "3600"))

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_HOST:     str = os.getenv("REDIS_HOST",     "localhost")
REDIS_PORT:     int = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB:       int = int(os.getenv("REDIS_DB",   "0"))
REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")

# ── Observability ─────────────────────────────────────────────────────────────
LOG_LEVEL:         str  = os.getenv("LOG_LEVEL", "INFO")
EVENT_LOG_ENABLED: bool = _flag("EVENT_LOG_ENABLED", "false")
EVENT_LOG_DIR:     str  = os.getenv("EVENT_LOG_DIR", "")   # "" → backend/logs
