from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List


@dataclass
class ReconcileResult:
    """Outcome of one reconcile call; `writes` counts status updates made."""

    writes: int = 0
    failures: List[str] = field(default_factory=list)
    unknown_codes: List[str] = field(default_factory=list)
    duplicate_codes: List[str] = field(default_factory=list)
    absence_sweep_ran: bool = False

    def to_dict(self) -> dict:
        return {
            "writes": self.writes,
            "failures": list(self.failures),
            "unknown_codes": list(self.unknown_codes),
            "duplicate_codes": list(self.duplicate_codes),
            "absence_sweep_ran": self.absence_sweep_ran,
        }


@dataclass(frozen=True)
class SyncReport:
    window_start: date
    window_end: date
    events: int
    employees: int
    result: ReconcileResult

    @property
    def writes(self) -> int:
        return self.result.writes

    def to_dict(self) -> dict:
        return {
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "events": self.events,
            "employees": self.employees,
            **self.result.to_dict(),
        }
