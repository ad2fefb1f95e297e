from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from ..common.datetime_utils import format_elapsed, now_local
from ..core.constants import TICK_INTERVAL_SECONDS, ZERO_ELAPSED

logger = logging.getLogger(__name__)


class ElapsedTimeTicker:
    """Live HH:MM:SS since the start of the active session.

    Purely local: it only reads the clock. At most one timer task exists at a
    time, and ``stop``/``aclose``/leaving ``async with`` always cancel it.
    """

    def __init__(
        self,
        *,
        on_tick: Optional[Callable[[str], None]] = None,
        clock: Callable[[], datetime] = now_local,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        interval: float = TICK_INTERVAL_SECONDS,
    ):
        self._on_tick = on_tick
        self._clock = clock
        self._sleep = sleep
        self._interval = float(interval)
        self._value = ZERO_ELAPSED
        self._task: Optional[asyncio.Task] = None

    @property
    def value(self) -> str:
        return self._value

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, active_session_start: Optional[datetime]) -> None:
        self.stop()
        if active_session_start is None:
            return
        self._task = asyncio.create_task(self._run(active_session_start), name="elapsed-ticker")
        self._task.add_done_callback(self._on_task_done)

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        self._value = ZERO_ELAPSED

    async def aclose(self) -> None:
        task = self._task if self.running else None
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def __aenter__(self) -> "ElapsedTimeTicker":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _run(self, start: datetime) -> None:
        while True:
            await self._sleep(self._interval)
            elapsed = self._clock() - start
            if elapsed.total_seconds() < 0:
                # Clock skew: clamp to zero and stop.
                logger.warning("session start %s is in the future, ticker stopped", start.isoformat())
                self._emit(ZERO_ELAPSED)
                return
            self._emit(format_elapsed(elapsed))

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("elapsed ticker crashed", exc_info=exc)

    def _emit(self, value: str) -> None:
        self._value = value
        if self._on_tick is not None:
            self._on_tick(value)
