from datetime import datetime, timedelta

from src.shop_attendance.shop_attendance.common.datetime_utils import (
    floor_minutes_between,
    format_elapsed,
    format_minutes,
    parse_iso_date,
)


def test_floor_minutes_exact_125():
    start = datetime(2026, 3, 2, 9, 0, 0)
    assert floor_minutes_between(start, start + timedelta(minutes=125)) == 125


def test_floor_minutes_rounds_down():
    start = datetime(2026, 3, 2, 9, 0, 0)
    assert floor_minutes_between(start, start + timedelta(minutes=4, seconds=59)) == 4


def test_floor_minutes_never_negative():
    start = datetime(2026, 3, 2, 9, 0, 0)
    assert floor_minutes_between(start, start - timedelta(minutes=3)) == 0


def test_format_elapsed_pads_fields():
    assert format_elapsed(timedelta(seconds=61)) == "00:01:01"
    assert format_elapsed(timedelta(hours=2, minutes=5, seconds=9, milliseconds=999)) == "02:05:09"


def test_format_elapsed_hours_not_wrapped_at_midnight():
    assert format_elapsed(timedelta(hours=26, minutes=1)) == "26:01:00"


def test_format_elapsed_exact_at_second_boundaries():
    assert format_elapsed(timedelta(seconds=59, microseconds=999_999)) == "00:00:59"
    assert format_elapsed(timedelta(days=3, microseconds=999)) == "72:00:00"
    assert format_elapsed(timedelta(hours=100_000, seconds=1)) == "100000:00:01"


def test_format_elapsed_negative_is_zero():
    assert format_elapsed(timedelta(seconds=-5)) == "00:00:00"


def test_format_minutes():
    assert format_minutes(125) == "2h 5m"
    assert format_minutes(0) == "0h 0m"


def test_parse_iso_date():
    assert parse_iso_date("2026-03-02").isoformat() == "2026-03-02"
