from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.exceptions import DataAccessError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import call_procedure, db_cursor, fetch_single, fetchall
from .model import AttendanceRecord, AttendanceReportRow, AutoStartResult
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, user_id, work_date, check_in, check_out, duration_minutes"


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    duration = r.get("duration_minutes")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=str(r["user_id"]),
        work_date=r["work_date"],
        check_in=r["check_in"],
        check_out=r.get("check_out"),
        duration_minutes=int(duration) if duration is not None else None,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def auto_start_attendance(self, user_id: str) -> AutoStartResult:
        with db_cursor(self._conn_factory) as (_, cur):
            rows = call_procedure(cur, "auto_start_attendance", (user_id,))
            if not rows:
                raise DataAccessError("auto_start_attendance returned no result", code="EMPTY_RESULT")
            r = rows[0]
            return AutoStartResult(
                attendance_id=int(r["attendance_id"]),
                is_new_session=bool(r["is_new_session"]),
            )

    def end_current_attendance(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            rows = call_procedure(cur, "end_current_attendance", (user_id,))
            return bool(rows and rows[0].get("ended"))

    def get_latest_open(self, user_id: str, work_date: date) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE user_id=%s AND work_date=%s AND check_out IS NULL
                ORDER BY check_in DESC
                LIMIT 1
                """,
                (user_id, work_date),
            )
            return _to_record(fetch_single(cur, what="open attendance"))

    def list_open_for_user(self, user_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE user_id=%s AND check_out IS NULL
                ORDER BY check_in DESC
                """,
                (user_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_checkin(self, *, user_id: str, work_date: date, check_in: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO attendance(user_id, work_date, check_in) VALUES(%s,%s,%s)",
                (user_id, work_date, check_in),
            )
            return int(cur.lastrowid)

    def close_record(self, *, attendance_id: int, check_out: datetime, duration_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_out=%s, duration_minutes=%s
                WHERE attendance_id=%s AND check_out IS NULL
                """,
                (check_out, int(duration_minutes), int(attendance_id)),
            )
            return cur.rowcount > 0

    def get_recent_for_user(self, user_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE user_id=%s
                ORDER BY check_in DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["a.duration_minutes IS NOT NULL"]
        params: list[object] = []

        if start_date is not None:
            clauses.append("a.work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("a.work_date <= %s")
            params.append(end_date)
        if user_id is not None:
            clauses.append("a.user_id = %s")
            params.append(user_id)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.user_id, u.name AS user_name, a.work_date, a.duration_minutes
                FROM attendance a
                LEFT JOIN users u ON u.user_id = a.user_id
                WHERE {where}
                ORDER BY a.work_date DESC
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(
                    user_id=str(r["user_id"]),
                    user_name=r.get("user_name"),
                    work_date=r["work_date"],
                    duration_minutes=int(r["duration_minutes"]),
                )
                for r in fetchall(cur)
            ]
