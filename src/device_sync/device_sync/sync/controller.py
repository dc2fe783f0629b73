from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..container import Container
from ..core.exceptions import SyncError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/", methods=["GET"], endpoint="health")
    def health():
        return "Device Sync Backend is running"

    @app.route("/api/device-sync", methods=["GET"], endpoint="device_sync")
    def device_sync():
        try:
            report = container.runner.run()
        except SyncError as e:
            logger.error("Manual device sync failed: %s", e)
            return jsonify({"error": str(e)}), 500
        except Exception as e:
            logger.exception("Manual device sync failed")
            if bool(app.config.get("DEBUG", False)):
                return jsonify({"error": f"Device sync failed: {e}"}), 500
            return jsonify({"error": "Device sync failed"}), 500

        return jsonify({"message": "Manual device sync complete", "report": report.to_dict()})
