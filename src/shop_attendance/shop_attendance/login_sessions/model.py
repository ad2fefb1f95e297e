from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class LoginSession:
    """Audit record of one browser/app sign-in, independent of attendance."""

    session_id: int
    user_id: str
    login_time: datetime
    logout_time: Optional[datetime] = None
    device_info: Optional[str] = None
