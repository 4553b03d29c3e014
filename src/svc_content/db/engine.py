from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .settings import DBSettings


def is_sqlite_memory(url: str) -> bool:
    return url.startswith("sqlite") and ":memory:" in url


def engine_options(settings: DBSettings, url: str) -> dict[str, Any]:
    options: dict[str, Any] = {
        "echo": settings.echo,
        "pool_pre_ping": True,
        "pool_recycle": settings.pool_recycle or 1800,
    }
    if is_sqlite_memory(url):
        # A single shared connection; a second one would open an empty database.
        options.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    else:
        options.update(pool_size=settings.pool_size, max_overflow=settings.max_overflow, pool_timeout=30)
    return options


class DBEngine:
    """Async engine plus session factory; the one database handle the service passes around.

    ``session()`` is for reads, ``transaction()`` commits on exit and rolls
    back if the block raises.
    """

    def __init__(self, settings: DBSettings):
        url = settings.resolved_database_url
        self._engine: AsyncEngine = create_async_engine(url, **engine_options(settings, url))
        self._sessions: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self._engine, expire_on_commit=False
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def dialect(self) -> str:
        """Backend name, e.g. ``sqlite`` or ``postgresql``; picks the cache upsert flavour."""
        return self._engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._sessions() as sess:
            yield sess

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        async with self._sessions.begin() as sess:
            yield sess

    async def dispose(self) -> None:
        await self._engine.dispose()
