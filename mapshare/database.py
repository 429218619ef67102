"""SQLite-backed credential store."""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from .errors import DuplicateEmailError, ServiceUnavailableError
from .models import Credentials, User

logger = logging.getLogger("mapshare.database")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _trace_sql(statement: str) -> None:
    logger.debug("SQL: %s", " ".join(statement.split()))


class Database:
    """Thin wrapper around SQLite for persisting user accounts."""

    def __init__(self, path: Path, *, timeout: float = 5.0) -> None:
        _ensure_directory(path)
        self._path = path
        self._timeout = timeout

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit on success and translate driver faults.

        Integrity errors are re-raised untouched so callers can map them to
        domain errors; every other SQLite failure becomes
        :class:`ServiceUnavailableError`.
        """
        try:
            conn = sqlite3.connect(self._path, timeout=self._timeout, check_same_thread=False)
        except sqlite3.Error as exc:
            logger.exception("Unable to open database at %s", self._path)
            raise ServiceUnavailableError() from exc

        conn.row_factory = sqlite3.Row
        if logger.isEnabledFor(logging.DEBUG):
            conn.set_trace_callback(_trace_sql)
        try:
            with conn:
                yield conn
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as exc:
            logger.exception("Database operation failed")
            raise ServiceUnavailableError() from exc
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT NOT NULL UNIQUE,
                    password TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );
                """
            )

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def create_user(self, email: str, password_hash: str) -> User:
        """Insert a new account and return it with its assigned id."""

        normalized_email = normalize_email(email)
        if not normalized_email:
            raise ValueError("Email must not be empty")
        if not password_hash:
            raise ValueError("Password hash must not be empty")

        created_at = _current_timestamp()
        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    "INSERT INTO users (email, password, created_at) VALUES (?, ?, ?)",
                    (normalized_email, password_hash, _serialize_datetime(created_at)),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateEmailError() from exc
            user_id = cursor.lastrowid

        return User(id=int(user_id), email=normalized_email, created_at=created_at)

    def email_exists(self, email: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM users WHERE email = ? LIMIT 1",
                (normalize_email(email),),
            ).fetchone()
        return row is not None

    def get_user(self, user_id: int) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def get_user_by_email(self, email: str) -> Optional[User]:
        credentials = self.get_credentials(email)
        return credentials.user if credentials is not None else None

    def get_credentials(self, email: str) -> Optional[Credentials]:
        """Return the single account registered under ``email``, if any."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?",
                (normalize_email(email),),
            ).fetchone()
        if row is None:
            return None
        return Credentials(user=self._row_to_user(row), password_hash=str(row["password"]))

    def list_users(self) -> List[User]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()
        return [self._row_to_user(row) for row in rows]

    def count_users(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) AS total FROM users").fetchone()
        return int(row["total"])

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            email=str(row["email"]),
            created_at=_parse_datetime(row["created_at"]),
        )


__all__ = ["Database", "normalize_email"]
