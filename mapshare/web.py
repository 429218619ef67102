"""Server-rendered pages and the account routes of the map sharing site."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import anyio
from fastapi import FastAPI, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from . import sessions
from .auth import AuthService
from .config import Settings
from .database import Database
from .errors import AuthError, CredentialMismatchError, ServiceUnavailableError
from .flash import consume_flash, messages_for, push_flash
from .models import User
from .security import PasswordHasher

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

logger = logging.getLogger("mapshare.web")
request_logger = logging.getLogger("mapshare.web.requests")


def referrer_path(request: Request) -> str:
    """Return the same-site part of the ``Referer`` header, or ``/``.

    Only a path and query are ever returned, so a forged header cannot send
    the browser to another host.
    """
    raw = request.headers.get("referer")
    if not raw:
        return "/"
    try:
        parts = urlsplit(raw)
    except ValueError:
        return "/"
    if parts.netloc and parts.netloc != request.url.netloc:
        return "/"
    path = parts.path or "/"
    if not path.startswith("/") or path.startswith("//"):
        return "/"
    return urlunsplit(("", "", path, parts.query, ""))


def create_app(
    *,
    database: Database,
    settings: Settings,
    hasher: Optional[PasswordHasher] = None,
) -> FastAPI:
    """Create the web application serving pages and the account routes."""

    auth = AuthService(database, hasher)

    app = FastAPI(
        title="Mapshare",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.database = database
    app.state.settings = settings
    app.state.auth = auth

    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=list(settings.trusted_proxies) or "127.0.0.1")
    sessions.install_session_middleware(app, settings)

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        request_logger.info(
            "%s %s %s %.1f ms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    def _redirect(location: str) -> RedirectResponse:
        return RedirectResponse(location, status_code=status.HTTP_302_FOUND)

    def _fail(request: Request, exc: AuthError, location: str) -> RedirectResponse:
        push_flash(request.session, exc.flash())
        return _redirect(location)

    async def _current_user(request: Request) -> Optional[User]:
        user_id = sessions.current_user_id(request.session)
        if user_id is None:
            return None
        user = await anyio.to_thread.run_sync(database.get_user, user_id)
        if user is None:
            logger.info("Clearing session for unknown user %s", user_id)
            sessions.clear(request.session)
        return user

    @app.get("/", response_class=HTMLResponse, name="home")
    async def home(request: Request):
        errors = messages_for(consume_flash(request.session), "error")
        try:
            user = await _current_user(request)
        except ServiceUnavailableError as exc:
            user = None
            errors.append(str(exc))
        return templates.TemplateResponse(
            request,
            "index.html",
            {"user": user, "logged_in": user is not None, "errors": errors},
        )

    @app.get("/profile", response_class=HTMLResponse, name="profile")
    async def profile(request: Request):
        try:
            user = await _current_user(request)
        except ServiceUnavailableError as exc:
            return _fail(request, exc, "/")
        if user is None:
            return _redirect("/")

        errors = messages_for(consume_flash(request.session), "error")
        return templates.TemplateResponse(
            request,
            "profile.html",
            {"user": user, "logged_in": True, "errors": errors},
        )

    @app.post("/register", name="register")
    async def register(request: Request, email: str = Form(""), password: str = Form("")):
        try:
            user = await anyio.to_thread.run_sync(auth.register, email, password)
        except AuthError as exc:
            return _fail(request, exc, referrer_path(request))

        sessions.establish(request.session, user.id)
        return _redirect("/")

    @app.post("/login", name="login")
    async def login(request: Request, email: str = Form(""), password: str = Form("")):
        try:
            user = await anyio.to_thread.run_sync(auth.login, email, password)
        except CredentialMismatchError as exc:
            return _fail(request, exc, "/")
        except AuthError as exc:
            return _fail(request, exc, referrer_path(request))

        sessions.establish(request.session, user.id)
        return _redirect("/")

    @app.post("/logout", name="logout")
    async def logout(request: Request):
        sessions.clear(request.session)
        return _redirect("/")

    return app


__all__ = ["TEMPLATE_DIR", "create_app", "referrer_path"]
