from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a row of the ``users`` table.

    Note: Plain data object (no DB access code here).
    """

    user_id: str
    email: str
    name: str
    password_hash: str
    role: Role
    is_active: bool = True


@dataclass(frozen=True)
class AuthUser:
    """Bare identity emitted by the auth provider, before profile enrichment."""

    id: str
    email: str


@dataclass(frozen=True)
class UserProfile:
    name: str
    role: Role


@dataclass(frozen=True)
class Identity:
    """Authenticated user as published to the rest of the app."""

    id: str
    email: str
    display_name: str
    role: Role

    @classmethod
    def enrich(cls, auth_user: AuthUser, profile: UserProfile | None) -> "Identity":
        if profile is None:
            # No profile row yet: least-privileged role, email as the name.
            return cls(id=auth_user.id, email=auth_user.email, display_name=auth_user.email, role=Role.EMPLOYEE)
        return cls(
            id=auth_user.id,
            email=auth_user.email,
            display_name=profile.name or auth_user.email,
            role=profile.role,
        )
