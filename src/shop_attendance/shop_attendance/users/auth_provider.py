from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Protocol

from ..core.enums import AuthEvent
from ..core.exceptions import AuthenticationError, DataAccessError, ValidationError
from .model import AuthUser
from .service import AuthService

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthEvent, Optional[AuthUser]], Awaitable[None]]


class AuthProvider(Protocol):
    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        raise NotImplementedError

    async def sign_in(self, email: str, password: str) -> bool:
        raise NotImplementedError

    async def sign_out(self) -> None:
        raise NotImplementedError

    async def restore(self) -> None:
        raise NotImplementedError


class LocalAuthProvider(AuthProvider):
    """Password auth against the ``users`` table, emitting state-change events.

    Listeners are awaited in subscription order. An exception raised by a
    listener propagates to whoever triggered the event.
    """

    def __init__(self, auth: AuthService, *, restored: Optional[AuthUser] = None):
        self._auth = auth
        self._current = restored
        self._listeners: List[AuthListener] = []

    @property
    def current_user(self) -> Optional[AuthUser]:
        return self._current

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _emit(self, event: AuthEvent, user: Optional[AuthUser]) -> None:
        for listener in list(self._listeners):
            await listener(event, user)

    async def sign_in(self, email: str, password: str) -> bool:
        try:
            user = await asyncio.to_thread(self._auth.authenticate, email, password)
        except (AuthenticationError, ValidationError) as e:
            logger.info("sign-in rejected: %s", e)
            return False
        except DataAccessError as e:
            logger.error("sign-in failed: %s", e, extra={"code": e.code})
            return False

        self._current = user
        await self._emit(AuthEvent.SIGNED_IN, user)
        return True

    async def sign_out(self) -> None:
        self._current = None
        await self._emit(AuthEvent.SIGNED_OUT, None)

    async def restore(self) -> None:
        """Announce the session present at startup (or its absence)."""
        await self._emit(AuthEvent.INITIAL, self._current)

    async def refresh(self) -> None:
        if self._current is not None:
            await self._emit(AuthEvent.TOKEN_REFRESHED, self._current)
