from __future__ import annotations

from typing import Optional

from .constants import ROW_NOT_FOUND


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DataAccessError(DomainError):
    """Raised when the data store fails or a single-row lookup finds nothing.

    ``code`` is stable and is what callers branch on; the message is for humans.
    """

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.code = code

    @property
    def is_row_not_found(self) -> bool:
        return self.code == ROW_NOT_FOUND


class ProfileLoadError(DomainError):
    """Raised when the profile of an authenticated user cannot be loaded."""
