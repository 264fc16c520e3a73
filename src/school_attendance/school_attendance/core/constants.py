"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

QR_SESSION_TTL_SECONDS = 10 * 60
QR_SWEEP_INTERVAL_SECONDS = 60

QR_CHECKIN_COMMENT = "QR Check-in"
NOT_ENROLLED_WARNING = "Not actively enrolled in this course"

UNKNOWN_FIRST_NAME = "Unknown"
UNKNOWN_LAST_NAME = "-"
UNKNOWN_HISTORY_LAST_NAME = "Unknown"
DEFAULT_NICKNAME = "-"
DEFAULT_HISTORY_TIME = "00:00"
