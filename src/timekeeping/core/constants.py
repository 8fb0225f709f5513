"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_IDLE_TIMEOUT_SEC = 100
DEFAULT_HISTORY_LIMIT = 30

# Input channels watched for user presence.
ACTIVITY_CHANNELS = ("mousemove", "mousedown", "click", "scroll", "keypress")

LOGOUT_NOTICE = "Session expired due to inactivity. You have been logged out automatically."

DEFAULT_LOGIN_URL = "/login"

# Only forward one pointer-move event per window from the OS hooks (saves CPU).
MOVE_THROTTLE_SEC = 0.5
