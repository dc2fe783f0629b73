from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .model import SyncReport

logger = logging.getLogger(__name__)


class _Flight:
    def __init__(self):
        self.done = threading.Event()
        self.report: Optional[SyncReport] = None
        self.error: Optional[BaseException] = None


class SyncRunner:
    """Single-flight guard around a reconciliation pass.

    At most one pass runs at a time. A caller arriving while a pass is in
    flight waits for it and shares its outcome instead of starting another.
    """

    def __init__(self, run_pass: Callable[[], SyncReport]):
        self._run_pass = run_pass
        self._lock = threading.Lock()
        self._flight: Optional[_Flight] = None

    def run(self) -> SyncReport:
        with self._lock:
            flight = self._flight
            leader = flight is None
            if leader:
                flight = self._flight = _Flight()

        if not leader:
            logger.info("Device sync already running; waiting for it to finish")
            flight.done.wait()
        else:
            try:
                flight.report = self._run_pass()
            except BaseException as e:
                flight.error = e
            finally:
                with self._lock:
                    self._flight = None
                flight.done.set()

        if flight.error is not None:
            raise flight.error
        return flight.report

    def run_scheduled(self) -> None:
        """Timer entry point: failures are logged so the timer keeps firing."""
        try:
            self.run()
        except Exception:
            logger.exception("Device sync failed")
