"""
Constants and magic numbers.

Centralizes all hardcoded values for easy maintenance.
Deployment-level values here can be overridden via config.json or
environment variables - this module provides the defaults.
"""
import os


# =============================================================================
# Server / Storage Defaults
# =============================================================================

DEFAULT_PORT = 3000
DEFAULT_DB_PATH = "./speed_monitor.db"
DEFAULT_TIMEZONE = "UTC"

TABLE_NAME = "speed_results"

# Dashboard document served at "/"
PUBLIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "public")
DASHBOARD_FILE = "dashboard.html"


# =============================================================================
# Pagination
# =============================================================================

DEFAULT_LIST_LIMIT = 100
MAX_LIST_LIMIT = 1000

DEFAULT_USER_LIMIT = 50
MAX_USER_LIMIT = 500

DEFAULT_OFFSET = 0


# =============================================================================
# Ingestion Defaults
# =============================================================================

SUCCESS_STATUS = "success"
DEFAULT_METRIC_VALUE = 0


# =============================================================================
# Stats
# =============================================================================

STATS_WINDOW_HOURS = 24
HOUR_BUCKET_FORMAT = "%Y-%m-%d %H:00"
STATS_DECIMALS = 2


# =============================================================================
# Error Messages (returned to callers)
# =============================================================================

MSG_USER_ID_REQUIRED = "user_id is required"
MSG_SAVE_FAILED = "Failed to save result"
MSG_FETCH_RESULTS_FAILED = "Failed to fetch results"
MSG_FETCH_STATS_FAILED = "Failed to fetch stats"
