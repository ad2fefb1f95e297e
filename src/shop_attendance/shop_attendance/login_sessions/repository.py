from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import LoginSession


class LoginSessionRepository(Protocol):
    def create(self, *, user_id: str, login_time: datetime, device_info: Optional[str]) -> int:
        raise NotImplementedError

    def close(self, *, session_id: int, logout_time: datetime) -> bool:
        raise NotImplementedError

    def get_recent_for_user(self, user_id: str, limit: int) -> Sequence[LoginSession]:
        raise NotImplementedError
