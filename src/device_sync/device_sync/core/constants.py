"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PORT = 5001
DEFAULT_SYNC_INTERVAL_SECONDS = 30
DEFAULT_SYNC_WINDOW_DAYS = 1
DEFAULT_DEVICE_API_TIMEOUT = 10.0
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY = 0.5
DEFAULT_RETRY_MAX_DELAY = 5.0

SYNC_JOB_ID = "device-sync"
