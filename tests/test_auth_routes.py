"""
HTTP surface tests for /auth.
"""
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from conftest import FakeProviders, make_gateway, make_session_factory
from socialauth.config import Settings, settings
from socialauth.database import get_db
from socialauth.dependencies.auth import get_gateway, get_session_issuer
from socialauth.main import app
from socialauth.middleware import logging as logging_middleware
from socialauth.services.session_issuer import SessionIssuer


def _client(tmp_path, gateway, create_schema=True):
    factory = make_session_factory(tmp_path / "users.db", create_schema=create_schema)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    return TestClient(app)


@pytest.fixture
def client(tmp_path, gateway):
    with _client(tmp_path, gateway) as c:
        yield c
    app.dependency_overrides.clear()


def _login(client, provider):
    begin = client.get(f"/auth/{provider}", follow_redirects=False)
    state = parse_qs(urlparse(begin.headers["location"]).query)["state"][0]
    return client.get(
        f"/auth/{provider}/callback",
        params={"code": "auth-code", "state": state},
        follow_redirects=False,
    )


def test_begin_redirects_to_provider(client):
    response = client.get("/auth/github", follow_redirects=False)

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.netloc == "github.com"
    assert parse_qs(location.query)["client_id"] == ["github-client-id"]


def test_unknown_provider_is_not_found(client):
    assert client.get("/auth/myspace", follow_redirects=False).status_code == 404
    assert client.get(
        "/auth/myspace/callback", params={"code": "c"}, follow_redirects=False
    ).status_code == 404


def test_denied_callback_redirects_back_to_provider(client):
    client.get("/auth/facebook", follow_redirects=False)

    response = client.get(
        "/auth/facebook/callback",
        params={"error": "access_denied"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == "/auth/facebook"
    assert settings.SESSION_COOKIE_NAME not in response.cookies


def test_successful_callback_sets_session_and_redirects(client):
    response = _login(client, "twitter")

    assert response.status_code == 302
    assert response.headers["location"] == settings.POST_LOGIN_REDIRECT
    set_cookie = response.headers["set-cookie"]
    assert f"{settings.SESSION_COOKIE_NAME}=" in set_cookie
    assert "HttpOnly" in set_cookie
    assert f"Max-Age={settings.SESSION_PERSISTENT_DAYS * 24 * 60 * 60}" in set_cookie

    me = client.get("/auth/me")
    assert me.status_code == 200
    body = me.json()
    assert body["name"] == "Carol"
    assert body["email"] is None
    assert body["provider"] == "twitter"


def test_repeat_login_returns_same_user(client):
    _login(client, "github")
    first = client.get("/auth/me").json()["id"]

    _login(client, "github")
    second = client.get("/auth/me").json()["id"]

    assert first == second


def test_me_requires_session(client):
    assert client.get("/auth/me").status_code == 401


def test_logout_clears_session(client):
    _login(client, "google")

    response = client.post("/auth/logout", follow_redirects=False)

    assert response.status_code == 303
    assert client.get("/auth/me").status_code == 401


def test_providers_lists_login_links(client):
    response = client.get("/auth/providers")

    names = {p["name"]: p["login_url"] for p in response.json()["providers"]}
    assert names["github"] == "/auth/github"
    assert set(names) == {"github", "twitter", "facebook", "google"}


def test_storage_failure_is_generic_500(tmp_path, gateway):
    with _client(tmp_path, gateway, create_schema=False) as client:
        response = _login(client, "github")
    app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"detail": "Authentication failed"}


def test_session_signing_failure_is_generic_500(client):
    app.dependency_overrides[get_session_issuer] = lambda: SessionIssuer(
        Settings(JWT_ALGORITHM="NOT-AN-ALGORITHM")
    )

    response = _login(client, "github")

    assert response.status_code == 500
    assert response.json() == {"detail": "Authentication failed"}
    assert settings.SESSION_COOKIE_NAME not in response.cookies
    assert client.get("/auth/me").status_code == 401


def test_non_object_profile_redirects_back_to_provider(tmp_path):
    providers = FakeProviders(profiles={"https://api.github.com/user": [1, 2]})
    with _client(tmp_path, make_gateway(providers)) as client:
        response = _login(client, "github")
    app.dependency_overrides.clear()

    assert response.status_code == 302
    assert response.headers["location"] == "/auth/github"


def test_signed_token_with_incomplete_payload_is_unauthorized(client):
    token = jwt.encode(
        {"sub": "user-1", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


class RecordingLogger:
    def __init__(self):
        self.bound = []
        self.events = []

    def bind(self, **context):
        self.bound.append(context)
        return self

    def info(self, event, **fields):
        self.events.append(event)

    def error(self, event, **fields):
        self.events.append(event)


def test_request_log_binds_routed_provider(client, monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr(logging_middleware, "logger", recorder)

    client.get("/auth/github", follow_redirects=False)

    assert recorder.events == ["request_completed"]
    assert recorder.bound[-1]["provider"] == "github"
    assert recorder.bound[-1]["route"] == "/auth/github"
