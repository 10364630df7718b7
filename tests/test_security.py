import asyncio
import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from aiohttp import web

from fit_tracker.core.config import Settings
from fit_tracker.core.security import AuthError, authenticate_token, decode_token_claims, user_from_claims


def test_decode_token_claims(token_factory):
    claims = decode_token_claims(token_factory("abc", "a@example.com", first_name="Ann"))
    assert claims["sub"] == "abc"
    assert claims["email"] == "a@example.com"
    assert claims["user_metadata"] == {"first_name": "Ann"}


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b", "a.!!!.c", "a.b.c.d"])
def test_decode_rejects_malformed(token):
    with pytest.raises(AuthError):
        decode_token_claims(token)


def test_user_from_claims_requires_subject():
    with pytest.raises(AuthError):
        user_from_claims({"email": "x@example.com"})


def test_user_from_claims_rejects_expired():
    now = datetime(2026, 5, 1, tzinfo=timezone.utc)
    expired = (now - timedelta(minutes=1)).timestamp()
    with pytest.raises(AuthError):
        user_from_claims({"sub": "u1", "exp": expired}, now=now)


def test_user_from_claims_metadata():
    user = user_from_claims(
        {"sub": "u1", "email": "u@example.com", "user_metadata": {"first_name": "U", "avatar_url": "http://img"}}
    )
    assert user.id == "u1"
    assert user.first_name == "U"
    assert user.last_name is None
    assert user.avatar_url == "http://img"


async def test_authenticate_token_decodes_locally_without_provider(token_factory):
    settings = Settings(_env_file=None, auth_provider_url="")
    user = await authenticate_token(token_factory("local-user"), settings)
    assert user.id == "local-user"


@pytest.mark.parametrize(
    "claims",
    [
        {"sub": "u1", "exp": "soon"},
        {"sub": "u1", "exp": [1]},
        {"sub": "u1", "user_metadata": "x"},
        {"sub": "u1", "user_metadata": [1, 2]},
        {"sub": "u1", "email": {"not": "an email"}},
    ],
)
def test_user_from_claims_rejects_malformed_claims(claims):
    with pytest.raises(AuthError):
        user_from_claims(claims)


def _raw_token(claims: dict) -> str:
    payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()
    return f"e30.{payload}.sig"


@pytest.mark.parametrize(
    "claims",
    [{"sub": "u1", "exp": "soon"}, {"sub": "u1", "user_metadata": "x"}, {"exp": 1}],
)
def test_malformed_claims_return_401(client, claims):
    r = client.get("/api/v1/auth/user", headers={"Authorization": f"Bearer {_raw_token(claims)}"})
    assert r.status_code == 401


async def _stall(request):
    await asyncio.sleep(2)
    return web.json_response({"id": "late"})


async def _html(request):
    return web.Response(text="<html>maintenance</html>", content_type="text/html")


async def _json_list(request):
    return web.json_response([1, 2])


async def _no_id(request):
    return web.json_response({"email": "x@example.com"})


async def _bad_metadata(request):
    return web.json_response({"id": "p1", "user_metadata": "x"})


async def _ok(request):
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.headers["apikey"] == "key"
    return web.json_response({"id": "p1", "email": "p@example.com", "user_metadata": {"first_name": "Pat"}})


async def _rejected(request):
    return web.json_response({"msg": "invalid"}, status=401)


@pytest.fixture
async def provider_url():
    app = web.Application()
    for path, handler in (
        ("/stall", _stall),
        ("/html", _html),
        ("/list", _json_list),
        ("/no-id", _no_id),
        ("/bad-metadata", _bad_metadata),
        ("/ok", _ok),
        ("/rejected", _rejected),
    ):
        app.router.add_get(f"{path}/auth/v1/user", handler)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = runner.addresses[0][1]
    yield f"http://127.0.0.1:{port}"
    await runner.cleanup()


def _provider_settings(base_url: str) -> Settings:
    return Settings(
        _env_file=None,
        auth_provider_url=base_url,
        auth_provider_api_key="key",
        auth_timeout_seconds=0.2,
    )


async def test_provider_user(provider_url):
    user = await authenticate_token("tok", _provider_settings(f"{provider_url}/ok"))
    assert user.id == "p1"
    assert user.email == "p@example.com"
    assert user.first_name == "Pat"


@pytest.mark.parametrize("path", ["/stall", "/html", "/list", "/no-id", "/bad-metadata", "/rejected", "/missing"])
async def test_provider_failures_raise_auth_error(provider_url, path):
    with pytest.raises(AuthError):
        await authenticate_token("tok", _provider_settings(f"{provider_url}{path}"))


async def test_unreachable_provider_raises_auth_error():
    with pytest.raises(AuthError):
        await authenticate_token("tok", _provider_settings("http://127.0.0.1:1"))
