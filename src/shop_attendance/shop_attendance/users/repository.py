from __future__ import annotations

from typing import Optional, Protocol

from .model import User, UserProfile


class UserRepository(Protocol):
    """Repository interface for users.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_profile(self, user_id: str) -> UserProfile:
        """Name and role of one user.

        Raises ``DataAccessError(code=ROW_NOT_FOUND)`` when the row is missing.
        """

        raise NotImplementedError
