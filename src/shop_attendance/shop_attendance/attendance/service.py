from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import floor_minutes_between, now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import DataAccessError, ValidationError
from ..users.model import Identity
from ..users.permissions import require_role
from .model import AttendanceRecord, AutoStartResult, DailyAttendanceTotal
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Open/close transitions of attendance records.

    With ``use_rpc`` the store-side procedures own the transitions; otherwise
    the same rules run here against plain row access. Either way at most one
    record per user stays open, and only open records are ever closed.
    """

    def __init__(self, attendance: AttendanceRepository, *, use_rpc: bool = True):
        self._attendance = attendance
        self._use_rpc = bool(use_rpc)

    def start_or_resume(self, user_id: str, *, now: datetime | None = None) -> AutoStartResult:
        if not user_id:
            raise ValidationError("User is required")
        if self._use_rpc:
            return self._attendance.auto_start_attendance(user_id)

        now = now or now_local()
        today = now.date()

        current = self._close_prior_days(self._attendance.list_open_for_user(user_id), today)
        if current is not None:
            return AutoStartResult(attendance_id=current.attendance_id, is_new_session=False)

        attendance_id = self._attendance.create_checkin(user_id=user_id, work_date=today, check_in=now)
        logger.info("attendance opened", extra={"user_id": user_id, "attendance_id": attendance_id})
        return AutoStartResult(attendance_id=attendance_id, is_new_session=True)

    def end_current(self, user_id: str, *, now: datetime | None = None) -> bool:
        if self._use_rpc:
            return self._attendance.end_current_attendance(user_id)

        now = now or now_local()
        open_records = sorted(self._attendance.list_open_for_user(user_id), key=lambda r: r.check_in)
        if not open_records:
            return False

        # A session may run past midnight: the latest record is closed for real,
        # anything older is dangling.
        current = open_records[-1]
        self._close_dangling(open_records[:-1])

        duration = floor_minutes_between(current.check_in, now)
        closed = self._attendance.close_record(
            attendance_id=current.attendance_id,
            check_out=now,
            duration_minutes=duration,
        )
        if closed:
            logger.info(
                "attendance closed after %s min",
                duration,
                extra={"user_id": user_id, "attendance_id": current.attendance_id},
            )
        return closed

    def _close_prior_days(self, open_records: Sequence[AttendanceRecord], today: date) -> Optional[AttendanceRecord]:
        """Close open records left over from earlier days; return today's latest."""
        current: Optional[AttendanceRecord] = None
        stale: list[AttendanceRecord] = []
        for rec in open_records:
            if rec.work_date < today:
                stale.append(rec)
            elif current is None or rec.check_in > current.check_in:
                current = rec
        self._close_dangling(stale)
        return current

    def _close_dangling(self, records: Sequence[AttendanceRecord]) -> None:
        # Real leave time is unknown: close at check-in with zero minutes.
        for rec in records:
            self._attendance.close_record(
                attendance_id=rec.attendance_id,
                check_out=rec.check_in,
                duration_minutes=0,
            )
            logger.warning(
                "closed dangling attendance from %s",
                rec.work_date.isoformat(),
                extra={"user_id": rec.user_id, "attendance_id": rec.attendance_id},
            )

    def get_active_session_start(self, user_id: str, *, today: date | None = None) -> Optional[datetime]:
        """``check_in`` of today's open record, or None when there is none."""
        today = today or now_local().date()
        try:
            record = self._attendance.get_latest_open(user_id, today)
        except DataAccessError as exc:
            if exc.is_row_not_found:
                return None
            raise
        return record.check_in

    def get_history(self, user_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.get_recent_for_user(user_id, int(limit))

    def daily_totals(
        self,
        viewer: Optional[Identity],
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        user_id: str | None = None,
    ) -> list[DailyAttendanceTotal]:
        """Closed minutes per user and work day, newest day first."""
        require_role(viewer, "attendance")
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date must not be before start date")

        rows = self._attendance.get_report_rows(start_date=start_date, end_date=end_date, user_id=user_id)

        totals: dict[tuple[str, date], DailyAttendanceTotal] = {}
        for r in rows:
            key = (r.user_id, r.work_date)
            prev = totals.get(key)
            minutes = r.duration_minutes + (prev.total_minutes if prev else 0)
            totals[key] = DailyAttendanceTotal(
                user_id=r.user_id,
                user_name=r.user_name or "Unknown User",
                work_date=r.work_date,
                total_minutes=minutes,
            )

        return sorted(totals.values(), key=lambda t: (-t.work_date.toordinal(), t.user_name))
