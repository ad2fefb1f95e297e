from __future__ import annotations

import asyncio

from src.shop_attendance.shop_attendance.core.enums import AuthEvent
from src.shop_attendance.shop_attendance.users.auth_provider import LocalAuthProvider
from src.shop_attendance.shop_attendance.users.model import AuthUser
from src.shop_attendance.shop_attendance.users.service import AuthService
from tests.fakes import InMemoryUsers, make_user


def _provider(**kwargs) -> LocalAuthProvider:
    users = InMemoryUsers(make_user("u-1", email="employee@shop.local", password="pw123456"))
    return LocalAuthProvider(AuthService(users), **kwargs)


def _recorder(events: list):
    async def listener(event, user):
        events.append((event, user))

    return listener


def test_sign_in_emits_signed_in():
    async def scenario():
        provider = _provider()
        events = []
        provider.subscribe(_recorder(events))

        ok = await provider.sign_in("employee@shop.local", "pw123456")

        assert ok is True
        assert events == [(AuthEvent.SIGNED_IN, AuthUser(id="u-1", email="employee@shop.local"))]
        assert provider.current_user == AuthUser(id="u-1", email="employee@shop.local")

    asyncio.run(scenario())


def test_bad_credentials_return_false_without_event():
    async def scenario():
        provider = _provider()
        events = []
        provider.subscribe(_recorder(events))

        assert await provider.sign_in("employee@shop.local", "nope") is False
        assert await provider.sign_in("", "nope") is False
        assert events == []
        assert provider.current_user is None

    asyncio.run(scenario())


def test_sign_out_restore_and_refresh_events():
    async def scenario():
        restored = AuthUser(id="u-1", email="employee@shop.local")
        provider = _provider(restored=restored)
        events = []
        unsubscribe = provider.subscribe(_recorder(events))

        await provider.restore()
        await provider.refresh()
        await provider.sign_out()
        await provider.refresh()
        await provider.restore()
        unsubscribe()
        await provider.restore()

        assert events == [
            (AuthEvent.INITIAL, restored),
            (AuthEvent.TOKEN_REFRESHED, restored),
            (AuthEvent.SIGNED_OUT, None),
            (AuthEvent.INITIAL, None),
        ]

    asyncio.run(scenario())
