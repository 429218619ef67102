"""Core package for the Mapshare web application."""

from __future__ import annotations

from typing import Any

from .config import Settings, load_settings
from .database import Database


def create_application(*args: Any, **kwargs: Any):
    """Factory function that returns the configured web application."""

    from .application import create_application as _create_application

    return _create_application(*args, **kwargs)


__all__ = [
    "Database",
    "Settings",
    "create_application",
    "load_settings",
]
