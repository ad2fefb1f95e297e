from __future__ import annotations

from datetime import date, datetime, timedelta

from ..core.constants import ZERO_ELAPSED


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def floor_minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, rounded down, never negative."""
    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


def format_elapsed(elapsed: timedelta) -> str:
    """Render ``elapsed`` as HH:MM:SS.

    Hours are not wrapped at 24, so a session spanning midnight keeps counting.
    """
    millis = elapsed // timedelta(milliseconds=1)
    if millis < 0:
        return ZERO_ELAPSED

    hours = millis // 3_600_000
    minutes = (millis % 3_600_000) // 60_000
    seconds = (millis % 60_000) // 1000
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_minutes(total_minutes: int) -> str:
    hours, mins = divmod(max(int(total_minutes), 0), 60)
    return f"{hours}h {mins}m"
