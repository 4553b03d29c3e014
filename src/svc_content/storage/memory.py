from __future__ import annotations

from typing import Optional

from .base import DEFAULT_CONTENT_TYPE, Body, StoredObject, read_body, validate_key


class MemoryStorage:
    """In-process storage for tests and local development."""

    def __init__(self):
        self._objects: dict[str, StoredObject] = {}

    async def head(self, key: str) -> Optional[StoredObject]:
        obj = self._objects.get(validate_key(key))
        if obj is None:
            return None
        return StoredObject(key=obj.key, content_type=obj.content_type, size=obj.size)

    async def get(self, key: str) -> Optional[StoredObject]:
        return self._objects.get(validate_key(key))

    async def put(self, key: str, data: Body, content_type: Optional[str] = None) -> bool:
        validate_key(key)
        body = await read_body(data)
        self._objects[key] = StoredObject(
            key=key,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            size=len(body),
            body=body,
        )
        return True

    async def delete(self, key: str) -> None:
        self._objects.pop(validate_key(key), None)

    def clear(self) -> None:
        self._objects.clear()
