"""Signed, client-held session cookie handling."""

from __future__ import annotations

from typing import MutableMapping, Optional

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from .config import Settings

USER_ID_KEY = "user_id"


def install_session_middleware(app: FastAPI, settings: Settings) -> None:
    """Store the session in a cookie signed with the configured secret.

    Nothing is kept on the server, so logging out only clears the field in
    this browser's cookie.
    """
    if not settings.session_secret:
        raise RuntimeError(
            "MAPSHARE_SESSION_SECRET (or session_secret in the settings file) must be configured"
        )

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        https_only=settings.secure_cookies,
        same_site="lax",
    )


def current_user_id(session: MutableMapping[str, object]) -> Optional[int]:
    value = session.get(USER_ID_KEY)
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def establish(session: MutableMapping[str, object], user_id: int) -> None:
    session[USER_ID_KEY] = user_id


def clear(session: MutableMapping[str, object]) -> None:
    session[USER_ID_KEY] = None


__all__ = ["USER_ID_KEY", "clear", "current_user_id", "establish", "install_session_middleware"]
