from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_DEVICE_INFO, DEFAULT_HISTORY_LIMIT
from .model import LoginSession
from .repository import LoginSessionRepository


class LoginSessionService:
    def __init__(self, sessions: LoginSessionRepository, *, device_info: Optional[str] = None):
        self._sessions = sessions
        self._device_info = device_info or DEFAULT_DEVICE_INFO

    def open(self, user_id: str, *, now: datetime | None = None) -> int:
        return self._sessions.create(
            user_id=user_id,
            login_time=now or now_local(),
            device_info=self._device_info,
        )

    def close(self, session_id: int, *, now: datetime | None = None) -> bool:
        return self._sessions.close(session_id=session_id, logout_time=now or now_local())

    def get_history(self, user_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[LoginSession]:
        return self._sessions.get_recent_for_user(user_id, int(limit))
