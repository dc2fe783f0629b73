from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, Optional, Sequence

from ..common.datetime_utils import today_utc, window_for
from ..common.retry import RetryPolicy, call_with_retry
from ..core.constants import DEFAULT_SYNC_WINDOW_DAYS
from ..core.enums import UserStatus
from ..core.exceptions import AbsenceSweepUnavailable, LookupFailed, WriteFailed
from ..devices.aggregator import LogAggregator
from ..devices.model import PunchEvent
from ..users.model import UserRecord
from ..users.repository import UserRepository
from .model import ReconcileResult, SyncReport

logger = logging.getLogger(__name__)


def compute_statuses(events: Iterable[PunchEvent]) -> Dict[str, UserStatus]:
    """Status per employee code from a most-recent-first event stream.

    The first event seen for a code decides it; later (older) ones are ignored.
    """
    statuses: Dict[str, UserStatus] = {}
    for event in events:
        if event.employee_code not in statuses:
            statuses[event.employee_code] = event.direction.to_status()
    return statuses


class StatusReconciler:
    """Use case: converge stored user status with the status computed from punches."""

    def __init__(self, users: UserRepository, *, retry: Optional[RetryPolicy] = None):
        self._users = users
        self._retry = retry or RetryPolicy()

    def reconcile(self, events: Sequence[PunchEvent]) -> ReconcileResult:
        computed = compute_statuses(events)
        result = ReconcileResult()

        for employee_code, status in computed.items():
            self._apply_computed(employee_code, status, result)

        self._sweep_absent(computed, result)
        return result

    def _apply_computed(self, employee_code: str, status: UserStatus, result: ReconcileResult) -> None:
        try:
            matches = call_with_retry(
                lambda: self._users.find_by_employee_code(employee_code),
                policy=self._retry,
                description=f"lookup of employee {employee_code}",
            )
        except Exception as e:
            err = LookupFailed(employee_code, str(e))
            logger.warning("%s", err)
            result.failures.append(str(err))
            return

        if not matches:
            logger.debug("No user for employee %s; skipping", employee_code)
            result.unknown_codes.append(employee_code)
            return

        if len(matches) > 1:
            logger.warning(
                "Employee code %s matches %s users (ids %s); using id %s",
                employee_code,
                len(matches),
                ", ".join(str(u.user_id) for u in matches),
                matches[0].user_id,
            )
            result.duplicate_codes.append(employee_code)

        user = matches[0]
        if user.is_admin:
            return

        if user.status != status:
            if self._write(user, status, result):
                logger.info("Updated %s -> %s", user.display_name, status.value)

    def _sweep_absent(self, computed: Dict[str, UserStatus], result: ReconcileResult) -> None:
        try:
            users = call_with_retry(self._users.list_all, policy=self._retry, description="user list read")
        except Exception as e:
            err = AbsenceSweepUnavailable(f"absence sweep skipped: {e}")
            logger.warning("%s", err)
            result.failures.append(str(err))
            return

        result.absence_sweep_ran = True
        for user in users:
            if user.is_admin:
                # Admins stay active whether or not they punched.
                if user.status != UserStatus.ACTIVE and self._write(user, UserStatus.ACTIVE, result):
                    logger.info("Admin %s forced to active", user.display_name)
                continue

            if user.employee_code in computed:
                continue

            if user.status != UserStatus.INACTIVE and self._write(user, UserStatus.INACTIVE, result):
                logger.info("No logs in window -> %s set to inactive", user.display_name)

    def _write(self, user: UserRecord, status: UserStatus, result: ReconcileResult) -> bool:
        try:
            updated = call_with_retry(
                lambda: self._users.update_status(user.user_id, status),
                policy=self._retry,
                description=f"status write for user {user.user_id}",
            )
        except Exception as e:
            err = WriteFailed(user.user_id, str(e))
        else:
            err = None if updated else WriteFailed(user.user_id, "no row updated")

        if err is not None:
            logger.warning("%s", err)
            result.failures.append(str(err))
            return False

        result.writes += 1
        return True


class DeviceSyncService:
    """Use case: one reconciliation pass (aggregate, then reconcile)."""

    def __init__(self, aggregator: LogAggregator, reconciler: StatusReconciler, *, window_days: int = DEFAULT_SYNC_WINDOW_DAYS):
        self._aggregator = aggregator
        self._reconciler = reconciler
        self._window_days = int(window_days)

    def run_pass(self, *, today: Optional[date] = None) -> SyncReport:
        window_start, window_end = window_for(today or today_utc(), self._window_days)

        # SourceUnavailable propagates from here, before any write.
        events = self._aggregator.aggregate(window_start, window_end)
        result = self._reconciler.reconcile(events)

        report = SyncReport(
            window_start=window_start,
            window_end=window_end,
            events=len(events),
            employees=len({e.employee_code for e in events}),
            result=result,
        )
        logger.info(
            "Device sync complete: %s events, %s employees, %s writes, %s failures",
            report.events,
            report.employees,
            report.writes,
            len(result.failures),
        )
        return report
