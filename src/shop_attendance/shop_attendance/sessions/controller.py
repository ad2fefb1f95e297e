from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..core.exceptions import ProfileLoadError
from ..users.auth_provider import AuthProvider
from .reconciler import SessionReconciler
from .state import SessionState, StateListener
from .ticker import ElapsedTimeTicker

logger = logging.getLogger(__name__)


class SessionController:
    """Thin glue between the auth provider, the reconciler and the ticker.

    This is the surface screens talk to: ``start`` at launch, then
    ``login``/``logout``, the published ``state``, the ``elapsed`` string and
    ``on_foreground``.
    """

    def __init__(self, auth: AuthProvider, reconciler: SessionReconciler, ticker: ElapsedTimeTicker):
        self._auth = auth
        self._reconciler = reconciler
        self._ticker = ticker
        self._ticking_from: Optional[datetime] = None
        self._unsubscribers: List[Callable[[], None]] = [
            auth.subscribe(reconciler.on_auth_event),
            reconciler.subscribe(self._on_state),
        ]

    @property
    def state(self) -> SessionState:
        return self._reconciler.state

    @property
    def elapsed(self) -> str:
        return self._ticker.value

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self._reconciler.subscribe(listener)

    def _on_state(self, state: SessionState) -> None:
        if state.active_session_start != self._ticking_from:
            self._ticking_from = state.active_session_start
            self._ticker.start(state.active_session_start)

    async def start(self) -> None:
        """Pick up the session present at startup. ``loading`` is False afterwards."""
        try:
            await self._auth.restore()
        except ProfileLoadError as e:
            logger.warning("restored session dropped: %s", e)

    async def login(self, email: str, password: str) -> bool:
        """False on bad credentials or when the profile cannot be loaded."""
        try:
            return await self._auth.sign_in(email, password)
        except ProfileLoadError as e:
            logger.warning("login aborted: %s", e)
            return False

    async def logout(self) -> None:
        await self._auth.sign_out()

    async def on_foreground(self) -> bool:
        return await self._reconciler.on_foreground()

    async def settle(self) -> None:
        await self._reconciler.settle()

    async def aclose(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._ticking_from = None
        await self._ticker.aclose()
        await self._reconciler.settle()
