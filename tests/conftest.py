"""
Root conftest.py for svc-content tests.

Shared fixtures:
- ``engine``: in-memory SQLite with the full schema
- ``app`` / ``client``: the FastAPI shell with the content pipeline mounted
- ``user`` / ``auth_headers``: a directory user and its bearer token
"""

from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from svc_content.api import create_app
from svc_content.app.settings import AppSettings
from svc_content.db import User, create_all, make_sqlite_memory_engine
from svc_content.db.settings import DBSettings
from svc_content.storage import MemoryStorage

TEST_EMAIL = "editor@example.com"
TEST_KEY = "test-key-0001"


def pytest_collection_modifyitems(config, items):
    """Mark auth and session tests so `-m security` selects them."""
    for item in items:
        norm = str(item.fspath).replace("\\", "/")
        if "session" in norm or "auth" in norm:
            item.add_marker(pytest.mark.security)


class RecordingSender:
    """Collects outgoing email instead of delivering it."""

    def __init__(self):
        self.messages: list[dict[str, str]] = []

    async def send(self, to: str, subject: str, text: str) -> None:
        self.messages.append({"to": to, "subject": subject, "text": text})


def _unrouted(request: httpx.Request) -> httpx.Response:
    return httpx.Response(599, text=f"unexpected request to {request.url}")


# =============================================================================
# DATABASE
# =============================================================================


@pytest_asyncio.fixture
async def engine():
    engine = make_sqlite_memory_engine()
    await create_all(engine.engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_ctx(engine):
    """Minimal stand-in for a request context when calling controllers directly."""
    return SimpleNamespace(db=engine)


@pytest_asyncio.fixture
async def user(engine) -> str:
    async with engine.transaction() as s:
        s.add(User(email=TEST_EMAIL, key=TEST_KEY))
    return TEST_EMAIL


@pytest.fixture
def auth_headers(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_KEY}"}


# =============================================================================
# APPLICATION
# =============================================================================


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(_env_file=None)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def mailer() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def http_handler():
    """Override to script outbound HTTP; unscripted calls get a 599."""
    return _unrouted


@pytest_asyncio.fixture
async def http_client(http_handler):
    async with httpx.AsyncClient(transport=httpx.MockTransport(http_handler)) as client:
        yield client


@pytest.fixture
def app(engine, app_settings, storage, mailer, http_client):
    return create_app(
        app_settings,
        DBSettings(_env_file=None, database_url="sqlite+aiosqlite:///:memory:", create_all=False),
        engine=engine,
        storage=storage,
        mailer=mailer,
        http_client=http_client,
    )


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
