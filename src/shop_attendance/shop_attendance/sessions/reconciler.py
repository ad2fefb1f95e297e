from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Coroutine, List, Optional, Set, Tuple

from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_local
from ..core.enums import AuthEvent, NotifyCategory
from ..core.exceptions import DataAccessError, ProfileLoadError
from ..login_sessions.service import LoginSessionService
from ..users.auth_provider import AuthProvider
from ..users.model import AuthUser, Identity
from ..users.service import ProfileService
from .notifier import LoggingNotifier, Notifier
from .state import SessionState, SessionStatePublisher, StateListener

logger = logging.getLogger(__name__)

RolloverListener = Callable[[date], None]


class SessionReconciler:
    """Keeps attendance and login-session rows in step with the auth state.

    Auth events go through ``on_auth_event``. The signed-in user is published
    as soon as the profile is known; attendance bookkeeping runs afterwards in
    detached tasks whose failures are flashed and logged, never raised. Those
    tasks are serialized by a lock, so a sign-out always lands after the
    sign-in that preceded it.

    Every auth event bumps a request token. Results that arrive under an older
    token are dropped, so a slow response cannot overwrite a newer state.
    """

    def __init__(
        self,
        auth: AuthProvider,
        profiles: ProfileService,
        attendance: AttendanceService,
        login_sessions: LoginSessionService,
        *,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._auth = auth
        self._profiles = profiles
        self._attendance = attendance
        self._login_sessions = login_sessions
        self._notifier = notifier or LoggingNotifier()
        self._clock = clock

        self._publisher = SessionStatePublisher()
        self._token = 0
        self._tasks: Set[asyncio.Task] = set()
        self._bookkeeping_lock = asyncio.Lock()
        self._login_session: Optional[Tuple[str, int]] = None
        self._last_known_day: Optional[date] = None
        self._rollover_listeners: List[RolloverListener] = []

    @property
    def state(self) -> SessionState:
        return self._publisher.current

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self._publisher.subscribe(listener)

    def add_day_rollover_listener(self, listener: RolloverListener) -> Callable[[], None]:
        self._rollover_listeners.append(listener)

        def remove() -> None:
            if listener in self._rollover_listeners:
                self._rollover_listeners.remove(listener)

        return remove

    # auth events

    async def on_auth_event(self, event: AuthEvent, auth_user: Optional[AuthUser]) -> None:
        if event == AuthEvent.SIGNED_OUT or auth_user is None:
            self._handle_signed_out(self._next_token())
            return

        current = self.state.user
        if event == AuthEvent.TOKEN_REFRESHED and current is not None and current.id == auth_user.id:
            return

        token = self._next_token()
        identity = await self._load_identity(auth_user, token)
        if not self._is_current(token):
            logger.info("superseded sign-in dropped", extra={"user_id": auth_user.id, "event": event.value})
            return

        previous = self.state.user
        if previous is not None and previous.id != identity.id:
            # Switched users without a sign-out.
            logger.info("user switch", extra={"user_id": previous.id, "event": event.value})
            self._end_session(previous)

        same_user = previous is not None and previous.id == identity.id
        self._last_known_day = self._clock().date()
        self._publish(
            user=identity,
            loading=False,
            active_session_start=self.state.active_session_start if same_user else None,
            session_loading=True,
        )
        self._spawn(self._start_bookkeeping(identity, token), name=f"attendance-start-{identity.id}")

    async def _load_identity(self, auth_user: AuthUser, token: int) -> Identity:
        try:
            profile = await asyncio.to_thread(self._profiles.get_user_profile, auth_user.id)
        except Exception as exc:
            logger.error(
                "profile lookup failed, signing out",
                exc_info=True,
                extra={"user_id": auth_user.id, "code": getattr(exc, "code", None)},
            )
            self._notifier.flash("Could not load your profile. You have been signed out.", NotifyCategory.DANGER)
            if self._is_current(token):
                await self._auth.sign_out()
                if self.state.user is not None or self.state.loading:
                    self._handle_signed_out(self._next_token())
            raise ProfileLoadError(f"Profile of user {auth_user.id} could not be loaded") from exc
        return Identity.enrich(auth_user, profile)

    def _handle_signed_out(self, token: int) -> None:
        outgoing = self.state.user
        self._last_known_day = None
        if outgoing is not None:
            self._end_session(outgoing)
        else:
            self._login_session = None

        self._publisher.publish(SessionState(user=None, loading=False))

    def _end_session(self, outgoing: Identity) -> None:
        login_session = self._login_session
        self._login_session = None
        self._spawn(self._end_bookkeeping(outgoing, login_session), name=f"attendance-end-{outgoing.id}")

    # bookkeeping

    async def _start_bookkeeping(self, identity: Identity, token: int) -> None:
        async with self._bookkeeping_lock:
            now = self._clock()
            try:
                result = await asyncio.to_thread(self._attendance.start_or_resume, identity.id, now=now)
                logger.info(
                    "attendance %s",
                    "started" if result.is_new_session else "resumed",
                    extra={"user_id": identity.id, "attendance_id": result.attendance_id},
                )
            except Exception as exc:
                self._report("Could not start your attendance session", exc, identity)

            if self._login_session is None or self._login_session[0] != identity.id:
                await self._open_login_session(identity, now)

            await self._refresh_active_session(identity, token)

    async def _open_login_session(self, identity: Identity, now: datetime) -> None:
        try:
            session_id = await asyncio.to_thread(self._login_sessions.open, identity.id, now=now)
        except Exception as exc:
            self._report("Could not record your login session", exc, identity)
            return

        if self._is_signed_in(identity):
            self._login_session = (identity.id, session_id)
            return

        # Signed out while the row was being written.
        try:
            await asyncio.to_thread(self._login_sessions.close, session_id, now=self._clock())
        except Exception as exc:
            self._report("Could not close your login session", exc, identity)

    async def _end_bookkeeping(self, identity: Identity, login_session: Optional[Tuple[str, int]]) -> None:
        async with self._bookkeeping_lock:
            now = self._clock()
            try:
                ended = await asyncio.to_thread(self._attendance.end_current, identity.id, now=now)
                logger.info("attendance ended" if ended else "no open attendance to end", extra={"user_id": identity.id})
            except Exception as exc:
                self._report("Could not end your attendance session", exc, identity)

            if login_session is not None and login_session[0] == identity.id:
                try:
                    await asyncio.to_thread(self._login_sessions.close, login_session[1], now=now)
                except Exception as exc:
                    self._report("Could not close your login session", exc, identity)

    # active session

    async def get_active_session_start(self, user_id: str) -> Optional[datetime]:
        """Check-in of today's open record; None when there is none."""
        return await asyncio.to_thread(
            self._attendance.get_active_session_start,
            user_id,
            today=self._clock().date(),
        )

    async def _refresh_active_session(self, identity: Identity, token: int) -> bool:
        """Re-read the active start; False when the read failed or was superseded.

        The last known day only moves on a successful read, so a failed
        rollover refresh is retried on the next foreground.
        """
        today = self._clock().date()
        try:
            start = await self.get_active_session_start(identity.id)
        except Exception as exc:
            self._report("Could not load your active session", exc, identity)
            if self._is_current(token) and self._is_signed_in(identity):
                self._publish(session_loading=False)
            return False

        if not self._is_current(token) or not self._is_signed_in(identity):
            return False
        self._last_known_day = today
        self._publish(active_session_start=start, session_loading=False)
        return True

    async def refresh(self) -> bool:
        """Re-read the active session of the signed-in user."""
        identity = self.state.user
        if identity is None:
            return False
        return await self._refresh_active_session(identity, self._token)

    async def on_foreground(self) -> bool:
        """Refresh when the app comes back to the foreground on a new day.

        Returns True when a refresh happened.
        """
        identity = self.state.user
        if identity is None:
            return False

        today = self._clock().date()
        if self._last_known_day == today:
            return False

        logger.info("day rollover %s -> %s", self._last_known_day, today, extra={"user_id": identity.id})
        if not await self._refresh_active_session(identity, self._token):
            return False
        for listener in list(self._rollover_listeners):
            listener(today)
        return True

    refresh_on_visible = on_foreground

    async def settle(self) -> None:
        """Wait until all detached bookkeeping has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # helpers

    def _next_token(self) -> int:
        self._token += 1
        return self._token

    def _is_current(self, token: int) -> bool:
        return token == self._token

    def _is_signed_in(self, identity: Identity) -> bool:
        user = self.state.user
        return user is not None and user.id == identity.id

    def _publish(self, **changes) -> None:
        self._publisher.publish(replace(self.state, **changes))

    def _spawn(self, coro: Coroutine, *, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("session task %s crashed", task.get_name(), exc_info=exc)

    def _report(self, message: str, exc: Exception, identity: Identity) -> None:
        code = exc.code if isinstance(exc, DataAccessError) else None
        logger.warning(message, exc_info=exc, extra={"user_id": identity.id, "code": code})
        self._notifier.flash(f"{message}: {exc}", NotifyCategory.DANGER)
