"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_VALIDITY_MINUTES = 15
# Upper bound for one check-in window (a school day).
MAX_TOKEN_VALIDITY_MINUTES = 12 * 60
DEFAULT_TOKEN_BYTES = 32
MIN_TOKEN_BYTES = 16
DEFAULT_TOKEN_SWEEP_SECONDS = 60

CHECKIN_PATH = "/api/attendance/qr-checkin"
DEFAULT_PUBLIC_BASE_URL = "http://localhost:5000"

DEFAULT_QUIET_HOURS_START = "22:00"
DEFAULT_QUIET_HOURS_END = "07:00"

MINUTES_PER_DAY = 24 * 60
MAX_NOTES_LENGTH = 500
DEFAULT_ACADEMIC_YEAR = "2024-2025"

# Attempts to re-read and re-decide a check-in after losing a concurrent write.
CHECKIN_MAX_ATTEMPTS = 3
