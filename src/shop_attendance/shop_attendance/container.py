from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import TICK_INTERVAL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .login_sessions.mysql_login_session_repository import MySQLLoginSessionRepository
from .login_sessions.service import LoginSessionService
from .sessions.controller import SessionController
from .sessions.notifier import Notifier
from .sessions.reconciler import SessionReconciler
from .sessions.ticker import ElapsedTimeTicker
from .users.auth_provider import LocalAuthProvider
from .users.model import AuthUser
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, ProfileService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    attendance_repo: MySQLAttendanceRepository
    login_sessions_repo: MySQLLoginSessionRepository

    auth_service: AuthService
    profile_service: ProfileService
    attendance_service: AttendanceService
    login_session_service: LoginSessionService

    auth_provider: LocalAuthProvider
    reconciler: SessionReconciler
    ticker: ElapsedTimeTicker
    session_controller: SessionController


def build_container(
    *,
    db_config: dict,
    use_rpc: bool = True,
    device_info: Optional[str] = None,
    tick_interval: float = TICK_INTERVAL_SECONDS,
    notifier: Optional[Notifier] = None,
    restored: Optional[AuthUser] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    login_sessions_repo = MySQLLoginSessionRepository(conn)

    auth_service = AuthService(users_repo)
    profile_service = ProfileService(users_repo)
    attendance_service = AttendanceService(attendance_repo, use_rpc=use_rpc)
    login_session_service = LoginSessionService(login_sessions_repo, device_info=device_info)

    auth_provider = LocalAuthProvider(auth_service, restored=restored)
    reconciler = SessionReconciler(
        auth_provider,
        profile_service,
        attendance_service,
        login_session_service,
        notifier=notifier,
    )
    ticker = ElapsedTimeTicker(interval=tick_interval)
    session_controller = SessionController(auth_provider, reconciler, ticker)

    return Container(
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        login_sessions_repo=login_sessions_repo,
        auth_service=auth_service,
        profile_service=profile_service,
        attendance_service=attendance_service,
        login_session_service=login_session_service,
        auth_provider=auth_provider,
        reconciler=reconciler,
        ticker=ticker,
        session_controller=session_controller,
    )
