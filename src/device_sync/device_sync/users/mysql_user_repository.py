from __future__ import annotations

from typing import Any, Dict, Sequence

from ..core.enums import Role, UserStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import UserRecord
from .repository import UserRepository

_SELECT_USERS = """
    SELECT id, employee_id, user_name, role, status
    FROM users
"""


def _to_user(row: Dict[str, Any]) -> UserRecord:
    raw_status = (row.get("status") or "").strip().lower()
    try:
        status = UserStatus(raw_status)
    except ValueError:
        # Unknown values never match a desired status, so they get rewritten.
        status = None
    return UserRecord(
        user_id=int(row["id"]),
        employee_code=str(row.get("employee_id") or "").strip(),
        display_name=row.get("user_name") or "",
        role=Role.from_db(row.get("role")),
        status=status,
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_employee_code(self, employee_code: str) -> Sequence[UserRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_USERS + " WHERE employee_id=%s ORDER BY id",
                (employee_code,),
            )
            users = [_to_user(r) for r in fetchall(cur)]
        # Codes match exactly, as in the absence sweep, even on a *_ci column.
        return [u for u in users if u.employee_code == employee_code]

    def list_all(self) -> Sequence[UserRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_USERS + " ORDER BY id")
            return [_to_user(r) for r in fetchall(cur)]

    def update_status(self, user_id: int, status: UserStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET status=%s WHERE id=%s", (status.value, int(user_id)))
            return cur.rowcount > 0
