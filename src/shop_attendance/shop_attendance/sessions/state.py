from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from ..users.model import Identity


@dataclass(frozen=True)
class SessionState:
    """What the rest of the app sees of the current sign-in.

    ``active_session_start`` is the check-in of the open attendance record of
    ``user`` for today, or None.
    """

    user: Optional[Identity] = None
    loading: bool = True
    active_session_start: Optional[datetime] = None
    session_loading: bool = False


StateListener = Callable[[SessionState], None]


class SessionStatePublisher:
    """Holds the current SessionState and pushes every change to subscribers."""

    def __init__(self, initial: Optional[SessionState] = None):
        self._state = initial or SessionState()
        self._listeners: List[StateListener] = []

    @property
    def current(self) -> SessionState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, state: SessionState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)
