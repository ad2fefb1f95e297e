from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.shop_attendance.shop_attendance.attendance.model import AttendanceRecord
from src.shop_attendance.shop_attendance.attendance.service import AttendanceService
from src.shop_attendance.shop_attendance.core.enums import Role
from src.shop_attendance.shop_attendance.core.exceptions import AuthorizationError, DataAccessError, ValidationError
from src.shop_attendance.shop_attendance.users.model import Identity
from tests.fakes import InMemoryAttendance

MANAGER = Identity(id="m-1", email="manager@shop.local", display_name="Manager", role=Role.MANAGER)
EMPLOYEE = Identity(id="u-1", email="employee@shop.local", display_name="Employee", role=Role.EMPLOYEE)


def test_start_creates_open_record(fixed_now):
    repo = InMemoryAttendance()
    svc = AttendanceService(repo, use_rpc=False)

    result = svc.start_or_resume("u-1", now=fixed_now)

    assert result.is_new_session is True
    rec = repo.records[result.attendance_id]
    assert rec.check_in == fixed_now
    assert rec.work_date == fixed_now.date()
    assert rec.is_open


def test_start_twice_same_day_reuses_open_record(fixed_now):
    repo = InMemoryAttendance()
    svc = AttendanceService(repo, use_rpc=False)

    first = svc.start_or_resume("u-1", now=fixed_now)
    second = svc.start_or_resume("u-1", now=fixed_now + timedelta(minutes=30))

    assert second.is_new_session is False
    assert second.attendance_id == first.attendance_id
    assert len(repo.open_records("u-1")) == 1


def test_start_closes_dangling_record_from_previous_day(fixed_now):
    yesterday = fixed_now - timedelta(days=1)
    dangling = AttendanceRecord(attendance_id=1, user_id="u-1", work_date=yesterday.date(), check_in=yesterday)
    repo = InMemoryAttendance(dangling)
    svc = AttendanceService(repo, use_rpc=False)

    result = svc.start_or_resume("u-1", now=fixed_now)

    assert result.is_new_session is True
    old = repo.records[1]
    assert old.check_out == yesterday
    assert old.duration_minutes == 0
    assert [r.attendance_id for r in repo.open_records("u-1")] == [result.attendance_id]


def test_end_current_duration_is_floored(fixed_now):
    repo = InMemoryAttendance(
        AttendanceRecord(attendance_id=1, user_id="u-1", work_date=fixed_now.date(), check_in=fixed_now)
    )
    svc = AttendanceService(repo, use_rpc=False)

    assert svc.end_current("u-1", now=fixed_now + timedelta(minutes=125, seconds=59)) is True
    assert repo.records[1].duration_minutes == 125


def test_end_current_closes_only_the_open_record(fixed_now):
    yesterday = fixed_now - timedelta(days=1)
    closed = AttendanceRecord(
        attendance_id=1,
        user_id="u-1",
        work_date=yesterday.date(),
        check_in=yesterday,
        check_out=yesterday + timedelta(hours=8),
        duration_minutes=480,
    )
    open_today = AttendanceRecord(attendance_id=2, user_id="u-1", work_date=fixed_now.date(), check_in=fixed_now)
    repo = InMemoryAttendance(closed, open_today)
    svc = AttendanceService(repo, use_rpc=False)

    assert svc.end_current("u-1", now=fixed_now + timedelta(minutes=5)) is True

    assert repo.records[1] == closed
    assert repo.records[2].check_out == fixed_now + timedelta(minutes=5)
    assert repo.records[2].duration_minutes == 5


def test_end_current_keeps_session_running_past_midnight(fixed_now):
    late = datetime(2026, 3, 1, 22, 0, 0)
    repo = InMemoryAttendance(AttendanceRecord(attendance_id=1, user_id="u-1", work_date=late.date(), check_in=late))
    svc = AttendanceService(repo, use_rpc=False)

    assert svc.end_current("u-1", now=datetime(2026, 3, 2, 1, 30, 0)) is True
    assert repo.records[1].duration_minutes == 210


def test_end_current_without_open_record_returns_false(fixed_now):
    svc = AttendanceService(InMemoryAttendance(), use_rpc=False)
    assert svc.end_current("u-1", now=fixed_now) is False


def test_rpc_mode_delegates_to_store_procedures():
    repo = InMemoryAttendance()
    svc = AttendanceService(repo, use_rpc=True)

    assert svc.start_or_resume("u-1").attendance_id == 99
    assert svc.end_current("u-1") is True
    assert repo.rpc_calls == [("auto_start_attendance", "u-1"), ("end_current_attendance", "u-1")]


def test_start_requires_user():
    with pytest.raises(ValidationError):
        AttendanceService(InMemoryAttendance()).start_or_resume("")


def test_active_session_start_none_when_no_open_row(fixed_now):
    svc = AttendanceService(InMemoryAttendance(), use_rpc=False)
    assert svc.get_active_session_start("u-1", today=fixed_now.date()) is None


def test_active_session_start_returns_latest_check_in(fixed_now):
    repo = InMemoryAttendance(
        AttendanceRecord(attendance_id=1, user_id="u-1", work_date=fixed_now.date(), check_in=fixed_now),
        AttendanceRecord(
            attendance_id=2,
            user_id="u-1",
            work_date=fixed_now.date(),
            check_in=fixed_now + timedelta(hours=1),
        ),
    )
    svc = AttendanceService(repo, use_rpc=False)
    assert svc.get_active_session_start("u-1", today=fixed_now.date()) == fixed_now + timedelta(hours=1)


def test_active_session_start_propagates_real_failures(fixed_now):
    class Broken(InMemoryAttendance):
        def get_latest_open(self, user_id, work_date):
            raise DataAccessError("Access denied", code="1045")

    with pytest.raises(DataAccessError) as exc_info:
        AttendanceService(Broken()).get_active_session_start("u-1", today=fixed_now.date())
    assert exc_info.value.code == "1045"


def _closed(attendance_id: int, user_id: str, day: date, minutes: int) -> AttendanceRecord:
    start = datetime.combine(day, datetime.min.time()) + timedelta(hours=9)
    return AttendanceRecord(
        attendance_id=attendance_id,
        user_id=user_id,
        work_date=day,
        check_in=start,
        check_out=start + timedelta(minutes=minutes),
        duration_minutes=minutes,
    )


def test_daily_totals_sums_per_user_and_day():
    d1, d2 = date(2026, 3, 1), date(2026, 3, 2)
    repo = InMemoryAttendance(
        _closed(1, "u-1", d1, 60),
        _closed(2, "u-1", d1, 30),
        _closed(3, "u-1", d2, 45),
        _closed(4, "u-2", d2, 10),
        AttendanceRecord(attendance_id=5, user_id="u-2", work_date=d2, check_in=datetime(2026, 3, 2, 12)),
        names={"u-1": "Alice"},
    )
    svc = AttendanceService(repo)

    totals = svc.daily_totals(MANAGER)

    assert [(t.user_name, t.work_date, t.total_minutes) for t in totals] == [
        ("Alice", d2, 45),
        ("Unknown User", d2, 10),
        ("Alice", d1, 90),
    ]


def test_daily_totals_filters_by_range_and_user():
    d1, d2 = date(2026, 3, 1), date(2026, 3, 2)
    repo = InMemoryAttendance(_closed(1, "u-1", d1, 60), _closed(2, "u-1", d2, 45), _closed(3, "u-2", d2, 10))
    svc = AttendanceService(repo)

    totals = svc.daily_totals(MANAGER, start_date=d2, end_date=d2, user_id="u-1")

    assert [(t.user_id, t.total_minutes) for t in totals] == [("u-1", 45)]


def test_daily_totals_rejects_inverted_range():
    with pytest.raises(ValidationError):
        AttendanceService(InMemoryAttendance()).daily_totals(
            MANAGER, start_date=date(2026, 3, 2), end_date=date(2026, 3, 1)
        )


def test_daily_totals_forbidden_for_employee():
    with pytest.raises(AuthorizationError):
        AttendanceService(InMemoryAttendance()).daily_totals(EMPLOYEE)
