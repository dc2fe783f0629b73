from __future__ import annotations

from typing import Protocol, Sequence

from ..core.enums import UserStatus
from .model import UserRecord


class UserRepository(Protocol):
    """Repository interface for UserRecord.

    Note (DIP): the reconciler depends on this interface, not on a concrete DB.
    """

    def find_by_employee_code(self, employee_code: str) -> Sequence[UserRecord]:
        """All records carrying `employee_code`, ordered by primary key."""
        raise NotImplementedError

    def list_all(self) -> Sequence[UserRecord]:
        raise NotImplementedError

    def update_status(self, user_id: int, status: UserStatus) -> bool:
        """Set the status of one record; False when no row was updated."""
        raise NotImplementedError
