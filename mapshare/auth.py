"""Registration and login flow for site accounts."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from .database import Database, normalize_email
from .errors import CredentialMismatchError, DuplicateEmailError, ValidationError
from .models import User
from .security import PasswordHasher

logger = logging.getLogger("mapshare.auth")

UNUSABLE_PASSWORD_MESSAGE = "Password contains characters that cannot be used"


def _require_fields(email: Optional[str], password: Optional[str]) -> Tuple[str, str]:
    normalized = normalize_email(email or "")
    if not normalized or not password:
        raise ValidationError()
    return normalized, password


class AuthService:
    """Validate credentials against the store and create new accounts.

    Every failure is raised as an :class:`~mapshare.errors.AuthError`
    subclass; the web layer turns it into a flash message and a redirect.
    """

    def __init__(self, database: Database, hasher: Optional[PasswordHasher] = None) -> None:
        self._database = database
        self._hasher = hasher or PasswordHasher()

    def register(self, email: Optional[str], password: Optional[str]) -> User:
        normalized, password = _require_fields(email, password)

        if self._database.email_exists(normalized):
            logger.warning("Registration rejected for %s: email already registered", normalized)
            raise DuplicateEmailError()

        try:
            password_hash = self._hasher.hash(password)
        except ValueError as exc:
            # bcrypt refuses NUL bytes
            logger.warning("Registration rejected for %s: %s", normalized, exc)
            raise ValidationError(UNUSABLE_PASSWORD_MESSAGE) from exc
        # The unique constraint on users.email still decides concurrent registrations.
        user = self._database.create_user(normalized, password_hash)
        logger.info("Registered user %s <%s>", user.id, user.email)
        return user

    def login(self, email: Optional[str], password: Optional[str]) -> User:
        normalized, password = _require_fields(email, password)

        credentials = self._database.get_credentials(normalized)
        if credentials is None:
            logger.warning("Failed login attempt for unknown email %s", normalized)
            raise CredentialMismatchError()

        if not self._hasher.verify(password, credentials.password_hash):
            logger.warning("Failed login attempt for %s", normalized)
            raise CredentialMismatchError()

        logger.info("User %s signed in", credentials.user.id)
        return credentials.user


__all__ = ["AuthService"]
