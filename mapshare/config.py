"""Configuration management for the map sharing site."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

DEFAULT_ENVIRONMENT = "development"
DEFAULT_SESSION_COOKIE = "session"
DEFAULT_SESSION_MAX_AGE = 24 * 60 * 60

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_path(raw: str, base_path: Optional[Path]) -> Path:
    candidate = Path(raw).expanduser()
    if candidate.is_absolute():
        return candidate.resolve(strict=False)
    if base_path is not None:
        return (base_path / candidate).resolve(strict=False)
    return candidate.resolve(strict=False)


def default_database_path(environment: str) -> Path:
    return (_PROJECT_ROOT / "data" / f"mapshare-{environment}.sqlite3").resolve(strict=False)


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, built once at start-up and passed around explicitly."""

    environment: str
    database_path: Path
    session_secret: Optional[str] = None
    session_cookie: str = DEFAULT_SESSION_COOKIE
    session_max_age: int = DEFAULT_SESSION_MAX_AGE
    secure_cookies: bool = False
    log_level: str = "INFO"
    trusted_proxies: Tuple[str, ...] = ("127.0.0.1",)

    @staticmethod
    def from_dict(
        environment: str,
        data: Mapping[str, object],
        base_path: Path | None = None,
    ) -> "Settings":
        """Create :class:`Settings` from one environment block of the YAML file."""

        database = data.get("database") or {}
        if not isinstance(database, Mapping):
            raise ValueError(f"'database' for environment '{environment}' must be a mapping")

        raw_path = database.get("path")
        if raw_path:
            database_path = _resolve_path(str(raw_path), base_path)
        else:
            database_path = default_database_path(environment)

        max_age = int(data.get("session_max_age", DEFAULT_SESSION_MAX_AGE))
        if max_age <= 0:
            raise ValueError("session_max_age must be a positive number of seconds")

        proxies = data.get("trusted_proxies", ("127.0.0.1",))
        if isinstance(proxies, str):
            proxies = [item.strip() for item in proxies.split(",")]

        secret = data.get("session_secret")
        return Settings(
            environment=environment,
            database_path=database_path,
            session_secret=str(secret) if secret else None,
            session_cookie=str(data.get("session_cookie") or DEFAULT_SESSION_COOKIE),
            session_max_age=max_age,
            secure_cookies=bool(data.get("secure_cookies", False)),
            log_level=str(data.get("log_level") or "INFO").upper(),
            trusted_proxies=tuple(str(item) for item in proxies if str(item).strip()),
        )

    def with_overrides(self, environ: Mapping[str, str]) -> "Settings":
        """Apply ``MAPSHARE_*`` environment overrides on top of the file values."""

        changes: Dict[str, object] = {}
        db_path = environ.get("MAPSHARE_DB_PATH")
        if db_path:
            changes["database_path"] = _resolve_path(db_path, None)
        secret = environ.get("MAPSHARE_SESSION_SECRET")
        if secret:
            changes["session_secret"] = secret
        secure = environ.get("MAPSHARE_SESSION_SECURE")
        if secure is not None:
            changes["secure_cookies"] = _env_flag(secure)
        log_level = environ.get("MAPSHARE_LOG_LEVEL")
        if log_level:
            changes["log_level"] = log_level.strip().upper()
        proxies = environ.get("MAPSHARE_TRUSTED_PROXIES")
        if proxies:
            changes["trusted_proxies"] = tuple(item.strip() for item in proxies.split(",") if item.strip())
        return replace(self, **changes) if changes else self


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the settings file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (_PROJECT_ROOT / "config" / "settings.yaml").resolve(strict=False)


def load_settings(
    config_path: Optional[Path] = None,
    environment: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load the settings for ``environment`` from YAML plus environment overrides.

    A missing file is not an error: every value has a default except the
    session secret, which the web application insists on when it is built.
    """
    if environ is None:
        environ = os.environ
    if config_path is None:
        config_path = resolve_config_path(environ.get("MAPSHARE_CONFIG"))
    if environment is None:
        environment = environ.get("MAPSHARE_ENV") or DEFAULT_ENVIRONMENT

    raw: Mapping[str, object] = {}
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, Mapping):
            raise ValueError(f"Configuration file {config_path} must contain a mapping of environments")
        raw = loaded

    block = raw.get(environment)
    if block is None:
        if raw:
            known = ", ".join(sorted(str(key) for key in raw))
            raise ValueError(f"Unknown environment '{environment}' (configured: {known})")
        block = {}
    if not isinstance(block, Mapping):
        raise ValueError(f"Environment '{environment}' must be a mapping")

    settings = Settings.from_dict(environment, block, base_path=config_path.parent)
    return settings.with_overrides(environ)


__all__ = [
    "DEFAULT_SESSION_COOKIE",
    "DEFAULT_SESSION_MAX_AGE",
    "Settings",
    "default_database_path",
    "load_settings",
    "resolve_config_path",
]
