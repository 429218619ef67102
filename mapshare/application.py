"""Application factory that wires settings, the credential store and the web app."""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from .config import Settings, load_settings
from .database import Database
from .security import PasswordHasher
from .web import create_app


def create_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    return database


def create_application(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    hasher: Optional[PasswordHasher] = None,
) -> FastAPI:
    """Create the ASGI application from ``settings`` (loaded from the environment when omitted)."""

    if settings is None:
        settings = load_settings()
    if database is None:
        database = create_database(settings)
    return create_app(database=database, settings=settings, hasher=hasher)


__all__ = ["create_application", "create_database"]
