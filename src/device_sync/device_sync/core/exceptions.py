from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConfigurationError(DomainError):
    """Raised at startup when a required setting is missing or malformed."""


class SyncError(DomainError):
    """Base exception for device sync failures."""


class SourceUnavailable(SyncError):
    """An event feed could not be fetched or parsed; the whole pass is aborted."""

    def __init__(self, feed: str, reason: str):
        super().__init__(f"{feed} feed unavailable: {reason}")
        self.feed = feed
        self.reason = reason


class LookupFailed(SyncError):
    """Reading the user records of one employee code failed."""

    def __init__(self, employee_code: str, reason: str):
        super().__init__(f"lookup failed for employee {employee_code}: {reason}")
        self.employee_code = employee_code
        self.reason = reason


class WriteFailed(SyncError):
    """Updating the status of one user record failed."""

    def __init__(self, user_id: int, reason: str):
        super().__init__(f"status write failed for user {user_id}: {reason}")
        self.user_id = user_id
        self.reason = reason


class AbsenceSweepUnavailable(SyncError):
    """The full user list could not be read, so the absence sweep is skipped."""
