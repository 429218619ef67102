from __future__ import annotations

from pathlib import Path

import pytest

from mapshare.config import (
    DEFAULT_SESSION_MAX_AGE,
    default_database_path,
    load_settings,
    resolve_config_path,
)


def _write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_environment_block_is_selected_by_variable(tmp_path: Path) -> None:
    config = _write_config(
        tmp_path,
        """
development:
  database:
    path: dev.sqlite3
  session_secret: dev-secret
production:
  database:
    path: /srv/mapshare/prod.sqlite3
  session_secret: prod-secret
  secure_cookies: true
  log_level: warning
""",
    )

    settings = load_settings(config, environ={"MAPSHARE_ENV": "production"})

    assert settings.environment == "production"
    assert settings.database_path == Path("/srv/mapshare/prod.sqlite3")
    assert settings.session_secret == "prod-secret"
    assert settings.secure_cookies is True
    assert settings.log_level == "WARNING"
    assert settings.session_cookie == "session"
    assert settings.session_max_age == DEFAULT_SESSION_MAX_AGE == 86400


def test_relative_database_path_resolves_against_config_directory(tmp_path: Path) -> None:
    config = _write_config(tmp_path, "development:\n  database:\n    path: data/dev.sqlite3\n")

    settings = load_settings(config, environ={})

    assert settings.environment == "development"
    assert settings.database_path == (tmp_path / "data" / "dev.sqlite3").resolve()
    assert settings.session_secret is None


def test_environment_variables_override_file_values(tmp_path: Path) -> None:
    config = _write_config(tmp_path, "test:\n  session_secret: from-file\n")

    settings = load_settings(
        config,
        environment="test",
        environ={
            "MAPSHARE_SESSION_SECRET": "from-env",
            "MAPSHARE_DB_PATH": str(tmp_path / "override.sqlite3"),
            "MAPSHARE_SESSION_SECURE": "yes",
            "MAPSHARE_LOG_LEVEL": "debug",
            "MAPSHARE_TRUSTED_PROXIES": "10.0.0.1, 10.0.0.2",
        },
    )

    assert settings.session_secret == "from-env"
    assert settings.database_path == (tmp_path / "override.sqlite3").resolve()
    assert settings.secure_cookies is True
    assert settings.log_level == "DEBUG"
    assert settings.trusted_proxies == ("10.0.0.1", "10.0.0.2")


def test_missing_file_falls_back_to_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "absent.yaml", environ={"MAPSHARE_ENV": "staging"})

    assert settings.environment == "staging"
    assert settings.database_path == default_database_path("staging")
    assert settings.session_secret is None


def test_unknown_environment_is_rejected(tmp_path: Path) -> None:
    config = _write_config(tmp_path, "development: {}\n")

    with pytest.raises(ValueError, match="Unknown environment"):
        load_settings(config, environment="production", environ={})


def test_invalid_session_max_age_is_rejected(tmp_path: Path) -> None:
    config = _write_config(tmp_path, "development:\n  session_max_age: 0\n")

    with pytest.raises(ValueError):
        load_settings(config, environ={})


def test_resolve_config_path_prefers_explicit_value(tmp_path: Path) -> None:
    explicit = tmp_path / "custom.yaml"
    assert resolve_config_path(str(explicit)) == explicit.resolve()
    assert resolve_config_path(None).name == "settings.yaml"
