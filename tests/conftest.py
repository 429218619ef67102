from __future__ import annotations

import base64
import json
import time
from pathlib import Path
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from itsdangerous import BadSignature, TimestampSigner

from mapshare.config import Settings
from mapshare.database import Database
from mapshare.security import PasswordHasher, build_password_context
from mapshare.web import create_app


SESSION_SECRET = "tests-secret-key"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        environment="test",
        database_path=tmp_path / "mapshare.sqlite3",
        session_secret=SESSION_SECRET,
    )


@pytest.fixture()
def database(settings: Settings) -> Database:
    db = Database(settings.database_path)
    db.initialize()
    return db


@pytest.fixture()
def hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast.
    return PasswordHasher(build_password_context(rounds=4))


@pytest.fixture()
def client(database: Database, settings: Settings, hasher: PasswordHasher):
    app = create_app(database=database, settings=settings, hasher=hasher)
    with TestClient(app) as test_client:
        yield test_client


def read_session(client: TestClient, settings: Settings) -> Dict[str, object]:
    """Decode the signed session cookie the browser currently holds."""

    raw = client.cookies.get(settings.session_cookie)
    if not raw:
        return {}
    signer = TimestampSigner(str(settings.session_secret))
    try:
        payload = signer.unsign(raw.encode("utf-8"), max_age=settings.session_max_age)
    except BadSignature:
        return {}
    return json.loads(base64.b64decode(payload))


def sign_session(settings: Settings, data: Dict[str, object], *, age: int = 0) -> str:
    """Build a session cookie value as the middleware would, ``age`` seconds ago."""

    class _BackdatedSigner(TimestampSigner):
        def get_timestamp(self) -> int:
            return int(time.time()) - age

    payload = base64.b64encode(json.dumps(data).encode("utf-8"))
    return _BackdatedSigner(str(settings.session_secret)).sign(payload).decode("utf-8")
