from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .engine import DBEngine
from .models import CacheEntry

logger = logging.getLogger(__name__)


class BaseCache(Protocol):
    async def get(self, key: str) -> Optional[Any]:
        ...

    async def put(self, key: str, value: Any) -> bool:
        ...

    async def delete(self, key: str) -> bool:
        ...


class SqlCache:
    """JSON values keyed by string, stored in the ``cache`` table.

    ``put`` is a single ``insert ... on conflict`` statement, so concurrent
    writers for one key cannot both take the insert path.
    """

    def __init__(self, engine: DBEngine):
        self._engine = engine

    def _upsert(self, key: str, serialized: str):
        values = {"key": key, "value": serialized}
        dialect = self._engine.dialect
        if dialect == "postgresql":
            stmt = pg_insert(CacheEntry).values(**values)
            return stmt.on_conflict_do_update(index_elements=[CacheEntry.key], set_={"value": stmt.excluded.value})
        if dialect != "sqlite":
            raise NotImplementedError(f"No cache upsert for the {dialect} dialect")
        stmt = sqlite_insert(CacheEntry).values(**values)
        return stmt.on_conflict_do_update(index_elements=[CacheEntry.key], set_={"value": stmt.excluded.value})

    async def get(self, key: str) -> Optional[Any]:
        async with self._engine.session() as s:
            raw = await s.scalar(select(CacheEntry.value).where(CacheEntry.key == key))
        return json.loads(raw) if raw else None

    async def put(self, key: str, value: Any) -> bool:
        async with self._engine.transaction() as s:
            res = await s.execute(self._upsert(key, json.dumps(value)))
        logger.debug("Cache put %s", key)
        return bool(res.rowcount)

    async def delete(self, key: str) -> bool:
        async with self._engine.transaction() as s:
            res = await s.execute(delete(CacheEntry).where(CacheEntry.key == key))
        return bool(res.rowcount)

