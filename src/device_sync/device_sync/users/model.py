from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, UserStatus


@dataclass(frozen=True)
class UserRecord:
    """Domain entity: a row of the users table.

    Note: Plain data object. Only `status` is ever written by the sync.
    """

    user_id: int
    employee_code: str
    display_name: str
    role: Role
    status: Optional[UserStatus]

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
