"""Runtime settings for the roster tracker.

Values that vary per deployment come from the environment; the rest are
fixed constants shared by the fetch, discovery and dashboard code.
"""
import os

API_BASE_URL = os.environ.get("FT_API_BASE_URL", "https://prod.api-fortnite.com/api/v1")
API_KEY_ENV = "FORTNITE_API_KEY"
REQUEST_TIMEOUT = int(os.environ.get("FT_TIMEOUT", "10"))

# File cache for upstream responses; unset disables caching
CACHE_DIR = os.environ.get("FT_CACHE_DIR") or None
LEADERBOARD_TTL = 300
PAST_EVENTS_TTL = 3600
CURRENT_EVENTS_TTL = 300

# Optional JSON roster replacing the built-in one
ROSTER_PATH = os.environ.get("FT_ROSTER_PATH") or None

DISPLAY_TIMEZONE = os.environ.get("FT_DISPLAY_TZ", "UTC")
LOG_LEVEL = os.environ.get("FT_LOG_LEVEL", "INFO")

# Leaderboards are read up to rank 5000: 50 pages of 100 entries
TOTAL_PAGES = 50
PAGE_BATCH_SIZE = 10

TOURNAMENT_LIMIT = 50
CUMULATIVE_SUFFIX = "_Cumulative"

# Tournament relevance filter
REGION_TOKEN = "_eu"
MAJOR_EVENT_PATTERN = r"fncs|victorycup|cashcup|soloseries|elite|champion|cup"
EXCLUDED_EVENT_PATTERN = r"mobile|ranked|stranger|android|ios|blitz|playstation"
FNCS_CUMULATIVE_EVENT = "FNCSDivisionalCup_Division1_EU"
ELITE_SERIES_TOKEN = "EliteSeries"
