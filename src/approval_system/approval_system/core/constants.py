"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

FIRST_SEQUENCE = 1
MIN_APPROVERS = 1
MAX_APPROVERS = 3
UNKNOWN_USER_NAME = "Unknown user"
DEFAULT_REMOTE_TIMEOUT_SECONDS = 5.0
DEFAULT_LEAVE_RETRY_ATTEMPTS = 0
