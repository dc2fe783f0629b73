from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role as far as status sync is concerned."""

    ADMIN = "admin"
    STANDARD = "standard"

    @classmethod
    def from_db(cls, value: str | None) -> "Role":
        # Anything that is not an admin is synced like a regular employee.
        if value and value.strip().lower() == cls.ADMIN.value:
            return cls.ADMIN
        return cls.STANDARD


class UserStatus(str, Enum):
    """Presence status stored on the users table."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class PunchDirection(str, Enum):
    IN = "in"
    OUT = "out"

    @classmethod
    def parse(cls, value) -> "PunchDirection":
        """Devices send free-form strings; only "in" (any case) means IN."""
        if isinstance(value, str) and value.strip().lower() == cls.IN.value:
            return cls.IN
        return cls.OUT

    def to_status(self) -> UserStatus:
        return UserStatus.ACTIVE if self is PunchDirection.IN else UserStatus.INACTIVE
