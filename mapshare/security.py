"""Password hashing helpers."""
from __future__ import annotations

from typing import Optional

from passlib.context import CryptContext


def build_password_context(*, rounds: Optional[int] = None) -> CryptContext:
    """Return a bcrypt context; ``rounds`` lowers the cost factor for tests."""

    if rounds is None:
        return CryptContext(schemes=["bcrypt"], deprecated="auto")
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


class PasswordHasher:
    """One-way password hashing with a fresh salt for every call."""

    def __init__(self, context: Optional[CryptContext] = None) -> None:
        self._context = context or build_password_context()

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Password must not be empty")
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        if not password or not hashed:
            return False
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            # unrecognised or malformed hash
            return False


__all__ = ["PasswordHasher", "build_password_context"]
