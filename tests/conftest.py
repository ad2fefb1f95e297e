from __future__ import annotations

from datetime import datetime

import pytest

from tests.fakes import FakeClock


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def fake_clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)
