from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.validators import require_email, require_non_empty
from ..core.exceptions import AuthenticationError, DataAccessError
from .model import AuthUser, UserProfile
from .repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: check credentials (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> AuthUser:
        email = require_email(email)
        require_non_empty(password, "Password")

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return AuthUser(id=user.user_id, email=user.email)


class ProfileService:
    """Use case: look up the display name and role of an authenticated user."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        """``None`` when the user has no profile row; other store errors propagate."""
        try:
            return self._users.get_profile(user_id)
        except DataAccessError as exc:
            if exc.is_row_not_found:
                logger.info("no profile row", extra={"user_id": user_id})
                return None
            raise
