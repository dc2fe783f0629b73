from .common import db_config

DB_CONFIG = db_config(default_password="12345")
DEVICE_API = {
    "base_url": "http://device.test/api/logs",
    "api_key": "test-key",
    "in_serial": "IN-001",
    "out_serial": "OUT-001",
    "timeout": 2,
}

PORT = 5001
DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SYNC_INTERVAL_SECONDS = 30
SYNC_WINDOW_DAYS = 1
SYNC_SCHEDULER_ENABLED = False

RETRY_ATTEMPTS = 1
RETRY_BASE_DELAY = 0
RETRY_MAX_DELAY = 0

AUTO_INIT_DB = False
