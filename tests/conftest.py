from __future__ import annotations

import base64
import json

import pytest
from fastapi.testclient import TestClient

from fit_tracker.core.config import Settings
from fit_tracker.main import create_application


def _b64(data: dict) -> str:
    raw = json.dumps(data).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def make_token(sub: str, email: str | None = None, exp: float | None = None, **metadata) -> str:
    """Unsigned JWT in the shape the identity provider issues."""
    claims: dict = {"sub": sub}
    if email:
        claims["email"] = email
    if exp is not None:
        claims["exp"] = exp
    if metadata:
        claims["user_metadata"] = metadata
    return f"{_b64({'alg': 'HS256', 'typ': 'JWT'})}.{_b64(claims)}.signature"


@pytest.fixture(params=["memory", "sqlite"])
def settings(request, tmp_path) -> Settings:
    """Every API test runs against the in-memory store and a throwaway SQLite database."""
    if request.param == "sqlite":
        backend = {"storage_backend": "postgres", "database_url": f"sqlite+aiosqlite:///{tmp_path}/api.db"}
    else:
        backend = {"storage_backend": "memory"}
    return Settings(
        _env_file=None,
        **backend,
        seed_defaults=True,
        auth_provider_url="",
        environment="test",
    )


@pytest.fixture
def client(settings):
    app = create_application(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers() -> dict[str, str]:
    token = make_token("user-1", "alice@example.com", first_name="Alice", last_name="Smith")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token('user-2', 'bob@example.com')}"}


@pytest.fixture
def exercise_ids(client) -> dict[str, int]:
    """Seeded exercise ids by name."""
    r = client.get("/api/v1/exercises")
    assert r.status_code == 200
    return {e["name"]: e["id"] for e in r.json()}


@pytest.fixture
def token_factory():
    return make_token
