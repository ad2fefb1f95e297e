from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for section gating."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class AuthEvent(str, Enum):
    """Authentication state changes emitted by the auth provider."""

    INITIAL = "initial"
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    TOKEN_REFRESHED = "token_refreshed"


class NotifyCategory(str, Enum):
    """Categories for non-blocking user feedback."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"
