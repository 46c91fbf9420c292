"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

REST_WEEKDAY = 7
DEFAULT_REPORT_DAYS = 7
DEFAULT_CACHE_TTL_SECONDS = 300
UNKNOWN_STUDENT_NAME = "—"
