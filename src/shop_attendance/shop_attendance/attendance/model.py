from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one continuous clocked-in interval of a user on a work day."""

    attendance_id: int
    user_id: str
    work_date: date
    check_in: datetime
    check_out: Optional[datetime] = None
    duration_minutes: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.check_out is None


@dataclass(frozen=True)
class AutoStartResult:
    attendance_id: int
    is_new_session: bool


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reporting: a closed record joined with the user's name."""

    user_id: str
    user_name: Optional[str]
    work_date: date
    duration_minutes: int


@dataclass(frozen=True)
class DailyAttendanceTotal:
    user_id: str
    user_name: str
    work_date: date
    total_minutes: int
