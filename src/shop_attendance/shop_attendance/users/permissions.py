"""Section-level role gating.

Each app section lists the roles allowed to open it. Unknown sections are
closed to everyone.
"""
from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import Identity

_ALL = frozenset({Role.ADMIN, Role.MANAGER, Role.EMPLOYEE})
_STAFF_LEADS = frozenset({Role.ADMIN, Role.MANAGER})
_ADMIN_ONLY = frozenset({Role.ADMIN})

SECTION_ROLES: Mapping[str, frozenset[Role]] = {
    "dashboard": _ALL,
    "submit-service": _ALL,
    "expenses": _ALL,
    "services": _STAFF_LEADS,
    "reports": _STAFF_LEADS,
    "attendance": _STAFF_LEADS,
    "team": _ADMIN_ONLY,
    "settings": _ADMIN_ONLY,
}


def can_access(role: Role, section: str) -> bool:
    return role in SECTION_ROLES.get(section, frozenset())


def accessible_sections(role: Role) -> Sequence[str]:
    """Sections visible to ``role``, in navigation order."""
    return [section for section, roles in SECTION_ROLES.items() if role in roles]


def require_role(identity: Optional[Identity], section: str) -> Identity:
    if identity is None:
        raise AuthorizationError("Sign in to continue")
    if not can_access(identity.role, section):
        raise AuthorizationError(f"Role '{identity.role.value}' cannot open '{section}'")
    return identity
