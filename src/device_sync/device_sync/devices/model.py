from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from ..common.datetime_utils import parse_log_date
from ..core.enums import PunchDirection


@dataclass(frozen=True)
class PunchEvent:
    """One clock-in/clock-out record read from an attendance device."""

    employee_code: str
    direction: PunchDirection
    timestamp: datetime

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PunchEvent":
        """Build an event from a device API object.

        Raises ValueError when the object has no usable EmployeeCode or LogDate.
        """
        if not isinstance(payload, Mapping):
            raise ValueError(f"Expected an object, got {type(payload).__name__}")

        code = payload.get("EmployeeCode")
        if code is None or isinstance(code, bool) or not str(code).strip():
            raise ValueError(f"Missing EmployeeCode in {dict(payload)!r}")

        return cls(
            employee_code=str(code).strip(),
            direction=PunchDirection.parse(payload.get("PunchDirection")),
            timestamp=parse_log_date(payload.get("LogDate")),
        )
