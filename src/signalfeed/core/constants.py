"""Shared constants for SignalFeed.

Backend table/function names, filter tags and feed defaults live here so
there is a single source of truth.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Signal vocabulary
# ---------------------------------------------------------------------------
DIRECTION_LONG: str = "long"
DIRECTION_SHORT: str = "short"
DIRECTIONS: tuple[str, ...] = (DIRECTION_LONG, DIRECTION_SHORT)

STATUS_ACTIVE: str = "active"
STATUS_CLOSED: str = "closed"
STATUS_CANCELLED: str = "cancelled"
SIGNAL_STATUSES: tuple[str, ...] = (STATUS_ACTIVE, STATUS_CLOSED, STATUS_CANCELLED)

SIGNAL_TYPES: tuple[str, ...] = ("spot", "futures", "margin")

# Values the backend (or data-entry tools) use for "price not provided".
PRICE_PLACEHOLDERS: frozenset[str] = frozenset({"", "-", "--", "n/a", "none", "null", "未提供"})

# ---------------------------------------------------------------------------
# Feed filters
# ---------------------------------------------------------------------------
FILTER_ALL: str = "all"
FILTER_LONG: str = DIRECTION_LONG
FILTER_SHORT: str = DIRECTION_SHORT
FILTER_SUBSCRIBED: str = "subscribed"
FILTER_FOLLOWED: str = "followed"

DIRECTION_FILTERS: frozenset[str] = frozenset({FILTER_ALL, FILTER_LONG, FILTER_SHORT})
SCOPE_FILTERS: frozenset[str] = frozenset({FILTER_SUBSCRIBED, FILTER_FOLLOWED})
ALL_FILTERS: frozenset[str] = DIRECTION_FILTERS | SCOPE_FILTERS

# ---------------------------------------------------------------------------
# Feed defaults (mirrored in feed_settings.json)
# ---------------------------------------------------------------------------
SETTINGS_FILENAME: str = "feed_settings.json"

DEFAULT_PAGE_SIZE: int = 20
DEFAULT_REFRESH_NOTICE_SECONDS: float = 2.0  # how long "loaded N signals" stays up
DEFAULT_REQUEST_TIMEOUT: float = 10.0
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_CALLS_PER_SECOND: float = 5.0
DEFAULT_FILTERS: list[str] = [FILTER_ALL]

MAX_PAGE_SIZE: int = 200

# ---------------------------------------------------------------------------
# Backend (hosted REST + RPC layer)
# ---------------------------------------------------------------------------
REST_PATH: str = "/rest/v1"
TABLE_SIGNALS: str = "signals"
TABLE_SUBSCRIPTIONS: str = "user_subscriptions"
TABLE_FOLLOWS: str = "user_follows"
TABLE_TRADERS: str = "traders"
RPC_PLATFORM_STATS: str = "get_platform_stats"

# Embedded trader columns requested alongside each signal.
TRADER_EMBED_COLUMNS: tuple[str, ...] = (
    "id",
    "name",
    "description",
    "avatar_url",
    "signal_count",
    "is_online",
)

# ---------------------------------------------------------------------------
# Metrics access (VIP / free trial)
# ---------------------------------------------------------------------------
FREE_TRIAL_DAYS: int = 7
VIP_STATUS_FREE: str = "free"
