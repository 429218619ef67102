from __future__ import annotations

from fastapi.testclient import TestClient

from mapshare import create_application
from mapshare.config import Settings


def test_create_application_initialises_the_configured_database(settings: Settings, hasher) -> None:
    app = create_application(settings, hasher=hasher)

    assert app.state.settings is settings
    assert settings.database_path.exists()

    with TestClient(app) as client:
        response = client.post(
            "/register",
            data={"email": "a@x.com", "password": "hunter2"},
            follow_redirects=False,
        )
        assert response.status_code == 302

    assert app.state.database.count_users() == 1
