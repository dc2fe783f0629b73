from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from src.device_sync.device_sync.core.enums import PunchDirection, Role, UserStatus
from src.device_sync.device_sync.devices.model import PunchEvent
from src.device_sync.device_sync.sync.service import StatusReconciler, compute_statuses
from src.device_sync.device_sync.users.model import UserRecord


class InMemoryUsers:
    def __init__(self, users):
        self._users = {u.user_id: u for u in users}
        self.writes: list[tuple[int, UserStatus]] = []
        self.fail_lookup_for: set[str] = set()
        self.fail_write_for: set[int] = set()
        self.fail_list = False

    def find_by_employee_code(self, employee_code: str):
        if employee_code in self.fail_lookup_for:
            raise RuntimeError("connection reset")
        return [u for _, u in sorted(self._users.items()) if u.employee_code == employee_code]

    def list_all(self):
        if self.fail_list:
            raise RuntimeError("connection reset")
        return [u for _, u in sorted(self._users.items())]

    def update_status(self, user_id: int, status: UserStatus) -> bool:
        if user_id in self.fail_write_for:
            raise RuntimeError("lock wait timeout")
        if user_id not in self._users:
            return False
        self._users[user_id] = replace(self._users[user_id], status=status)
        self.writes.append((user_id, status))
        return True

    def status_of(self, user_id: int) -> UserStatus:
        return self._users[user_id].status


def user(user_id, code, *, role=Role.STANDARD, status=UserStatus.INACTIVE) -> UserRecord:
    return UserRecord(user_id=user_id, employee_code=code, display_name=f"user-{code}", role=role, status=status)


def punch(code, direction, hour, minute) -> PunchEvent:
    return PunchEvent(employee_code=code, direction=direction, timestamp=datetime(2026, 2, 2, hour, minute))


def newest_first(*events):
    return sorted(events, key=lambda e: e.timestamp, reverse=True)


def test_compute_statuses_first_event_wins():
    events = [
        punch("E1", PunchDirection.OUT, 17, 0),
        punch("E1", PunchDirection.IN, 8, 0),
        punch("E2", PunchDirection.IN, 9, 0),
    ]

    assert compute_statuses(events) == {"E1": UserStatus.INACTIVE, "E2": UserStatus.ACTIVE}


def test_reference_scenario_writes_expected_deltas(no_retry):
    repo = InMemoryUsers(
        [
            user(1, "E1"),
            user(2, "E2"),
            user(3, "E3", status=UserStatus.ACTIVE),
            user(4, "E4", role=Role.ADMIN),
        ]
    )
    events = newest_first(
        punch("E1", PunchDirection.OUT, 10, 0),
        punch("E1", PunchDirection.IN, 10, 5),
        punch("E2", PunchDirection.IN, 9, 0),
    )

    result = StatusReconciler(repo, retry=no_retry).reconcile(events)

    assert dict(repo.writes) == {
        1: UserStatus.ACTIVE,
        2: UserStatus.ACTIVE,
        3: UserStatus.INACTIVE,
        4: UserStatus.ACTIVE,
    }
    assert result.writes == 4
    assert result.failures == []
    assert result.absence_sweep_ran is True


def test_second_pass_on_same_input_writes_nothing(no_retry):
    repo = InMemoryUsers([user(1, "E1"), user(2, "E2", status=UserStatus.ACTIVE), user(3, "A", role=Role.ADMIN)])
    events = newest_first(punch("E1", PunchDirection.IN, 8, 0))
    reconciler = StatusReconciler(repo, retry=no_retry)

    first = reconciler.reconcile(events)
    second = reconciler.reconcile(events)

    assert first.writes == 3
    assert second.writes == 0


def test_admin_stays_active_even_after_punching_out(no_retry):
    repo = InMemoryUsers([user(1, "A1", role=Role.ADMIN, status=UserStatus.INACTIVE), user(2, "A2", role=Role.ADMIN, status=UserStatus.ACTIVE)])
    events = newest_first(punch("A1", PunchDirection.OUT, 18, 0), punch("A2", PunchDirection.OUT, 18, 30))

    StatusReconciler(repo, retry=no_retry).reconcile(events)

    assert repo.status_of(1) == UserStatus.ACTIVE
    assert repo.status_of(2) == UserStatus.ACTIVE
    assert repo.writes == [(1, UserStatus.ACTIVE)]


def test_absent_employee_becomes_inactive(no_retry):
    repo = InMemoryUsers([user(1, "E1", status=UserStatus.ACTIVE), user(2, "E2", status=UserStatus.INACTIVE)])

    result = StatusReconciler(repo, retry=no_retry).reconcile([])

    assert repo.status_of(1) == UserStatus.INACTIVE
    assert repo.writes == [(1, UserStatus.INACTIVE)]
    assert result.writes == 1


def test_punched_out_employee_is_not_touched_again_by_sweep(no_retry):
    repo = InMemoryUsers([user(1, "E1", status=UserStatus.ACTIVE)])

    StatusReconciler(repo, retry=no_retry).reconcile([punch("E1", PunchDirection.OUT, 12, 0)])

    assert repo.writes == [(1, UserStatus.INACTIVE)]


def test_one_failed_write_does_not_stop_the_others(no_retry):
    repo = InMemoryUsers([user(1, "E1"), user(2, "E2"), user(3, "E3", status=UserStatus.ACTIVE)])
    repo.fail_write_for.add(2)
    events = newest_first(punch("E1", PunchDirection.IN, 8, 0), punch("E2", PunchDirection.IN, 8, 1))

    result = StatusReconciler(repo, retry=no_retry).reconcile(events)

    assert repo.status_of(1) == UserStatus.ACTIVE
    assert repo.status_of(2) == UserStatus.INACTIVE
    assert repo.status_of(3) == UserStatus.INACTIVE
    assert result.writes == 2
    assert len(result.failures) == 1
    assert "user 2" in result.failures[0]


def test_lookup_failure_skips_only_that_employee(no_retry):
    repo = InMemoryUsers([user(1, "E1"), user(2, "E2")])
    repo.fail_lookup_for.add("E1")
    events = newest_first(punch("E1", PunchDirection.IN, 8, 0), punch("E2", PunchDirection.IN, 8, 1))

    result = StatusReconciler(repo, retry=no_retry).reconcile(events)

    assert repo.writes == [(2, UserStatus.ACTIVE)]
    assert any("employee E1" in f for f in result.failures)


def test_unavailable_user_list_skips_only_the_sweep(no_retry):
    repo = InMemoryUsers([user(1, "E1"), user(2, "E2", status=UserStatus.ACTIVE)])
    repo.fail_list = True

    result = StatusReconciler(repo, retry=no_retry).reconcile([punch("E1", PunchDirection.IN, 8, 0)])

    assert repo.writes == [(1, UserStatus.ACTIVE)]
    assert result.absence_sweep_ran is False
    assert any("absence sweep skipped" in f for f in result.failures)


def test_unknown_employee_code_is_skipped(no_retry):
    repo = InMemoryUsers([user(1, "E1", status=UserStatus.ACTIVE)])

    result = StatusReconciler(repo, retry=no_retry).reconcile([punch("X9", PunchDirection.IN, 8, 0), punch("E1", PunchDirection.IN, 7, 0)])

    assert result.unknown_codes == ["X9"]
    assert result.writes == 0


def test_duplicate_employee_code_uses_first_record(no_retry):
    repo = InMemoryUsers([user(1, "E1"), user(2, "E1")])

    result = StatusReconciler(repo, retry=no_retry).reconcile([punch("E1", PunchDirection.IN, 8, 0)])

    assert repo.writes == [(1, UserStatus.ACTIVE)]
    assert result.duplicate_codes == ["E1"]


def test_transient_write_error_is_retried():
    from src.device_sync.device_sync.common.retry import RetryPolicy

    class FlakyUsers(InMemoryUsers):
        def __init__(self, users):
            super().__init__(users)
            self.calls = 0

        def update_status(self, user_id, status):
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("deadlock")
            return super().update_status(user_id, status)

    repo = FlakyUsers([user(1, "E1")])
    result = StatusReconciler(repo, retry=RetryPolicy(attempts=2, base_delay=0, max_delay=0)).reconcile(
        [punch("E1", PunchDirection.IN, 8, 0)]
    )

    assert result.writes == 1
    assert result.failures == []
    assert repo.status_of(1) == UserStatus.ACTIVE


def test_unknown_stored_status_is_rewritten(no_retry):
    repo = InMemoryUsers([user(1, "E1", status=None)])

    StatusReconciler(repo, retry=no_retry).reconcile([])

    assert repo.writes == [(1, UserStatus.INACTIVE)]


def test_employee_codes_differing_only_in_case_do_not_flap(no_retry):
    repo = InMemoryUsers([user(1, "EMP01", status=UserStatus.ACTIVE)])
    events = [punch("emp01", PunchDirection.IN, 8, 0)]
    reconciler = StatusReconciler(repo, retry=no_retry)

    first = reconciler.reconcile(events)
    second = reconciler.reconcile(events)

    assert first.unknown_codes == ["emp01"]
    assert repo.writes == [(1, UserStatus.INACTIVE)]
    assert second.writes == 0
    assert repo.status_of(1) == UserStatus.INACTIVE
