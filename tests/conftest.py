"""
Shared fixtures: a file-backed SQLite user store and a provider gateway
whose HTTP traffic goes to an in-process mock of the providers.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["SENTRY_DSN"] = ""

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from socialauth.models.base import Base
from socialauth.models import user  # noqa: F401
from socialauth.providers.base import ProviderCredentials
from socialauth.services.provider_gateway import PROVIDER_CLASSES, ProviderGateway

PROFILES = {
    "https://api.github.com/user": {
        "id": 583231,
        "login": "octocat",
        "name": "The Octocat",
        "email": None,
    },
    "https://api.twitter.com/2/users/me": {
        "data": {"id": "tw_123", "name": "Carol", "username": "carol"},
    },
    "https://graph.facebook.com/v19.0/me": {
        "id": "fb_42",
        "name": "Dave",
        "email": "dave@example.com",
    },
    "https://openidconnect.googleapis.com/v1/userinfo": {
        "sub": "g_7",
        "name": "Erin",
        "email": "erin@example.com",
    },
}


class FakeProviders:
    """
    httpx handler standing in for every provider's token and profile
    endpoints. Records each request it serves.
    """

    def __init__(self, profiles=None):
        self.profiles = dict(PROFILES if profiles is None else profiles)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            return httpx.Response(
                200, json={"access_token": "token-123", "token_type": "Bearer"}
            )
        url = str(request.url)
        for profile_url, payload in self.profiles.items():
            if url.startswith(profile_url):
                return httpx.Response(200, json=payload)
        return httpx.Response(404, json={"error": "not_found"})


def make_gateway(handler, timeout: float = 5.0) -> ProviderGateway:
    providers = {
        name: provider_cls(
            ProviderCredentials(
                client_id=f"{name}-client-id",
                client_secret=f"{name}-client-secret",
                callback_url=f"http://testserver/auth/{name}/callback",
            )
        )
        for name, provider_cls in PROVIDER_CLASSES.items()
    }
    return ProviderGateway(
        providers, timeout=timeout, transport=httpx.MockTransport(handler)
    )


def make_session_factory(path, create_schema: bool = True):
    if create_schema:
        sync_engine = create_engine(f"sqlite:///{path}")
        Base.metadata.create_all(sync_engine)
        sync_engine.dispose()
    # NullPool: every session opens its own connection on the current loop
    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
def session_factory(tmp_path):
    return make_session_factory(tmp_path / "users.db")


@pytest.fixture
def fake_providers():
    return FakeProviders()


@pytest.fixture
def gateway(fake_providers):
    return make_gateway(fake_providers)
