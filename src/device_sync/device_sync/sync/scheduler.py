from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from ..core.constants import SYNC_JOB_ID
from .runner import SyncRunner

logger = logging.getLogger(__name__)


def build_scheduler(runner: SyncRunner, *, interval_seconds: int) -> BackgroundScheduler:
    """Fixed-interval timer for the sync; overlapping runs are coalesced, never stacked."""
    if int(interval_seconds) <= 0:
        raise ValueError("interval_seconds must be positive")

    scheduler = BackgroundScheduler(
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": int(interval_seconds),
        }
    )
    scheduler.add_job(
        runner.run_scheduled,
        "interval",
        seconds=int(interval_seconds),
        id=SYNC_JOB_ID,
        replace_existing=True,
    )
    return scheduler


def start_scheduler(runner: SyncRunner, *, interval_seconds: int) -> BackgroundScheduler:
    scheduler = build_scheduler(runner, interval_seconds=interval_seconds)
    scheduler.start()
    logger.info("Device sync scheduled every %ss", interval_seconds)
    return scheduler
