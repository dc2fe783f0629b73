import os


def db_config(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": os.getenv("DB_PORT", "3306"),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "device_sync_db"),
        "connection_timeout": os.getenv("DB_CONNECT_TIMEOUT", "10"),
    }


def device_api() -> dict:
    # No defaults: missing values must stop the app at startup.
    return {
        "base_url": os.getenv("DEVICE_API_URL", ""),
        "api_key": os.getenv("DEVICE_API_KEY", ""),
        "in_serial": os.getenv("IN_DEVICE_SERIAL", ""),
        "out_serial": os.getenv("OUT_DEVICE_SERIAL", ""),
        "timeout": os.getenv("DEVICE_API_TIMEOUT", "10"),
    }
