from __future__ import annotations

import json
from types import SimpleNamespace

import httpx
import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from svc_content.api import create_app
from svc_content.app.settings import AppSettings
from svc_content.db import SqlCache
from svc_content.plugins.bigcommerce import STORE_CACHE_KEY
from svc_content.plugins.bigcommerce.server import TOKEN_URL, resolve_store_token

pytestmark = [pytest.mark.plugins, pytest.mark.asyncio]

SECRET = "client-secret"


@pytest.fixture
def token_requests():
    return []


@pytest.fixture
def http_handler(token_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            token_requests.append(json.loads(request.content))
            return httpx.Response(200, json={"access_token": "store-token", "scope": "store_v2_content"})
        return httpx.Response(404)

    return handler


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(_env_file=None, bigcommerce_client_id="client-id", bigcommerce_client_secret=SECRET)


@pytest_asyncio.fixture
async def store_installed(engine):
    await SqlCache(engine).put(STORE_CACHE_KEY, {"hash": "abc123", "token": "store-token"})


def _store_jwt(email: str, secret: str = SECRET) -> str:
    return jwt.encode({"user": {"email": email}, "aud": "client-id"}, secret, algorithm="HS256")


async def test_install_exchanges_code_and_caches_store(client, engine, token_requests):
    resp = await client.get(
        "/install", params={"code": "c0de", "context": "stores/abc123", "scope": "store_v2_content"}
    )

    assert resp.status_code == 302
    assert resp.headers["location"] == "/"
    assert token_requests[0]["code"] == "c0de"
    assert token_requests[0]["client_secret"] == SECRET
    assert token_requests[0]["redirect_uri"].endswith("/install")
    assert await SqlCache(engine).get(STORE_CACHE_KEY) == {"hash": "abc123", "token": "store-token"}


@pytest.mark.parametrize(
    "params",
    [{}, {"code": "c", "context": "stores/abc"}, {"code": "c", "context": "stores", "scope": "s"}],
)
async def test_install_requires_parameters(client, params):
    assert (await client.get("/install", params=params)).status_code == 400


async def test_store_jwt_is_an_identity(client, store_installed):
    headers = {"Authorization": f"Bearer {_store_jwt('merchant@example.com')}"}
    assert (await client.put("/api/pages/home", json={"t": 1}, headers=headers)).status_code == 204
    assert (await client.get("/api/session", headers=headers)).json() == {"email": "merchant@example.com"}


async def test_jwt_with_wrong_secret_is_rejected(client, store_installed):
    headers = {"Authorization": f"Bearer {_store_jwt('merchant@example.com', 'other')}"}
    assert (await client.get("/api/pages", headers=headers)).status_code == 401


async def test_uninstall_requires_store(client, engine, store_installed):
    assert (await client.get("/uninstall")).status_code == 401

    headers = {"Authorization": f"Bearer {_store_jwt('merchant@example.com')}"}
    assert (await client.get("/uninstall", headers=headers)).status_code == 204
    assert await SqlCache(engine).get(STORE_CACHE_KEY) is None


async def test_routes_absent_without_credentials(engine, storage, mailer, http_client):
    app = create_app(
        AppSettings(_env_file=None), engine=engine, storage=storage, mailer=mailer, http_client=http_client
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        assert (await c.get("/install", params={"code": "c"})).status_code == 404


class _DictCache:
    def __init__(self, values: dict):
        self.values = values

    async def get(self, key):
        return self.values.get(key)


async def test_resolved_store_uses_configured_batch_size():
    ctx = SimpleNamespace(
        token=_store_jwt("owner@example.com"),
        settings=AppSettings(
            _env_file=None,
            bigcommerce_client_id="client-id",
            bigcommerce_client_secret=SECRET,
            bigcommerce_batch_size=2,
        ),
        user=False,
        cache=_DictCache({STORE_CACHE_KEY: {"hash": "abc123", "token": "store-token"}}),
        environment=SimpleNamespace(http=None),
        extras={},
    )

    await resolve_store_token(ctx)

    assert ctx.user == "owner@example.com"
    store = ctx.extras["store"]
    assert (store.hash, store.batch_size) == ("abc123", 2)
