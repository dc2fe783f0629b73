from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .core.constants import DEFAULT_PORT, DEFAULT_SYNC_INTERVAL_SECONDS
from .core.exceptions import ConfigurationError
from .database.bootstrap import apply_schema, list_tables
from .sync.controller import register as register_sync
from .sync.scheduler import start_scheduler

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _settings_dict(settings) -> dict:
    return {name: getattr(settings, name) for name in dir(settings) if name.isupper()}


def _port_from(settings) -> int:
    raw = getattr(settings, "PORT", DEFAULT_PORT)
    try:
        port = int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"PORT must be an integer, got {raw!r}")
    if not 0 < port < 65536:
        raise ConfigurationError(f"PORT out of range: {port}")
    return port


def _interval_from(settings) -> int:
    raw = getattr(settings, "SYNC_INTERVAL_SECONDS", DEFAULT_SYNC_INTERVAL_SECONDS)
    try:
        interval = int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"SYNC_INTERVAL_SECONDS must be an integer, got {raw!r}")
    if interval <= 0:
        raise ConfigurationError("SYNC_INTERVAL_SECONDS must be positive")
    return interval


def _flag_from(settings, name: str, default: bool) -> bool:
    raw = getattr(settings, name, default)
    if isinstance(raw, bool):
        return raw
    value = str(raw).strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off", ""}:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}")


def create_app(*, start_timer: bool | None = None, **overrides) -> Flask:
    """Build the Flask app.

    `overrides` are passed to build_container (tests inject fake repositories
    and device clients this way).
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    db_config = getattr(settings, "DB_CONFIG", None)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["PORT"] = _port_from(settings)
    app.config["SYNC_INTERVAL_SECONDS"] = _interval_from(settings)

    # Helpful startup info to see which database the sync writes to.
    if db_config:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

    auto_init_db = _flag_from(settings, "AUTO_INIT_DB", False)
    scheduler_enabled = _flag_from(settings, "SYNC_SCHEDULER_ENABLED", True)

    container = build_container(
        db_config=db_config,
        device_config=getattr(settings, "DEVICE_API", {}),
        sync_config=_settings_dict(settings),
        **overrides,
    )
    app.extensions["device_sync"] = container

    if auto_init_db and "users_repo" not in overrides:
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

    register_sync(app, container)

    if start_timer is None:
        start_timer = scheduler_enabled
    if start_timer:
        app.extensions["device_sync_scheduler"] = start_scheduler(
            container.runner, interval_seconds=app.config["SYNC_INTERVAL_SECONDS"]
        )

    return app


def run() -> None:
    app = create_app()
    port = app.config["PORT"]
    logger.info("Device Sync Server on port %s", port)
    # The reloader would start a second scheduler in the child process.
    app.run(host="0.0.0.0", port=port, debug=app.config["DEBUG"], use_reloader=False)


if __name__ == "__main__":
    run()
