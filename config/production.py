import os

from .common import db_config, device_api

DB_CONFIG = db_config()
DEVICE_API = device_api()

# Env values stay strings here; create_app and build_container convert and validate them.

PORT = os.getenv("PORT", "5001")
DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SYNC_INTERVAL_SECONDS = os.getenv("SYNC_INTERVAL_SECONDS", "30")
SYNC_WINDOW_DAYS = os.getenv("SYNC_WINDOW_DAYS", "1")
SYNC_SCHEDULER_ENABLED = os.getenv("SYNC_SCHEDULER_ENABLED", "1")

RETRY_ATTEMPTS = os.getenv("RETRY_ATTEMPTS", "3")
RETRY_BASE_DELAY = os.getenv("RETRY_BASE_DELAY", "0.5")
RETRY_MAX_DELAY = os.getenv("RETRY_MAX_DELAY", "5")

AUTO_INIT_DB = os.getenv("AUTO_INIT_DB", "0")
