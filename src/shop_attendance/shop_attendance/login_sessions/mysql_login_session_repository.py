from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import LoginSession
from .repository import LoginSessionRepository


class MySQLLoginSessionRepository(LoginSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, user_id: str, login_time: datetime, device_info: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO sessions(user_id, login_time, device_info) VALUES(%s,%s,%s)",
                (user_id, login_time, device_info),
            )
            return int(cur.lastrowid)

    def close(self, *, session_id: int, logout_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE sessions SET logout_time=%s WHERE id=%s AND logout_time IS NULL",
                (logout_time, int(session_id)),
            )
            return cur.rowcount > 0

    def get_recent_for_user(self, user_id: str, limit: int) -> Sequence[LoginSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, login_time, logout_time, device_info
                FROM sessions
                WHERE user_id=%s
                ORDER BY login_time DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            return [
                LoginSession(
                    session_id=int(r["id"]),
                    user_id=str(r["user_id"]),
                    login_time=r["login_time"],
                    logout_time=r.get("logout_time"),
                    device_info=r.get("device_info"),
                )
                for r in fetchall(cur)
            ]
