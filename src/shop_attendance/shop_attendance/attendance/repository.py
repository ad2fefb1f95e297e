from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceReportRow, AutoStartResult


class AttendanceRepository(Protocol):
    def auto_start_attendance(self, user_id: str) -> AutoStartResult:
        """Store-side reuse-or-create of today's open record (idempotent)."""

        raise NotImplementedError

    def end_current_attendance(self, user_id: str) -> bool:
        """Store-side close of the open record; False when nothing was open."""

        raise NotImplementedError

    def get_latest_open(self, user_id: str, work_date: date) -> AttendanceRecord:
        """Most recent open record of ``work_date``.

        Raises ``DataAccessError(code=ROW_NOT_FOUND)`` when there is none.
        """

        raise NotImplementedError

    def list_open_for_user(self, user_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(self, *, user_id: str, work_date: date, check_in: datetime) -> int:
        raise NotImplementedError

    def close_record(self, *, attendance_id: int, check_out: datetime, duration_minutes: int) -> bool:
        """Close one record if it is still open; False otherwise."""

        raise NotImplementedError

    def get_recent_for_user(self, user_id: str, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
