"""Domain models for the map sharing site."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    """Represents an account stored in the ``users`` table."""

    id: int
    email: str
    created_at: datetime


@dataclass(frozen=True)
class Credentials:
    """A stored account together with its password hash, used only for login checks."""

    user: User
    password_hash: str


__all__ = ["Credentials", "User"]
