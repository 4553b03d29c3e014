from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

from .base import DEFAULT_CONTENT_TYPE, Body, InvalidKeyError, StoredObject, read_body, validate_key

logger = logging.getLogger(__name__)

# Sidecar tree; keys under it are reserved.
META_DIR = ".meta"
META_SUFFIX = ".json"


class LocalStorage:
    """Files under ``base_path``; content types are kept in JSON sidecars under ``.meta/``."""

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_file_path(self, key: str) -> Path:
        validate_key(key)
        if key.split("/", 1)[0] == META_DIR:
            raise InvalidKeyError(f"Reserved file key: {key!r}")
        return self.base_path / key

    def _get_metadata_path(self, key: str) -> Path:
        self._get_file_path(key)
        return self.base_path / META_DIR / (key + META_SUFFIX)

    def _read_meta(self, key: str) -> dict:
        meta_path = self._get_metadata_path(key)
        if not meta_path.exists():
            return {}
        try:
            meta = json.loads(meta_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Unreadable metadata for %s; using defaults", key)
            return {}
        return meta if isinstance(meta, dict) else {}

    def _head(self, key: str) -> Optional[StoredObject]:
        path = self._get_file_path(key)
        if not path.is_file():
            return None
        meta = self._read_meta(key)
        return StoredObject(
            key=key,
            content_type=meta.get("content_type") or DEFAULT_CONTENT_TYPE,
            size=path.stat().st_size,
        )

    def _get(self, key: str) -> Optional[StoredObject]:
        obj = self._head(key)
        if obj is None:
            return None
        obj.body = self._get_file_path(key).read_bytes()
        return obj

    def _write(self, key: str, body: bytes, content_type: str) -> None:
        path = self._get_file_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(body)
        meta_path = self._get_metadata_path(key)
        meta_path.parent.mkdir(parents=True, exist_ok=True)
        meta_path.write_text(
            json.dumps({"content_type": content_type, "size": len(body)}), encoding="utf-8"
        )

    def _delete(self, key: str) -> None:
        self._get_file_path(key).unlink(missing_ok=True)
        self._get_metadata_path(key).unlink(missing_ok=True)

    async def head(self, key: str) -> Optional[StoredObject]:
        return await asyncio.to_thread(self._head, key)

    async def get(self, key: str) -> Optional[StoredObject]:
        return await asyncio.to_thread(self._get, key)

    async def put(self, key: str, data: Body, content_type: Optional[str] = None) -> bool:
        self._get_file_path(key)
        body = await read_body(data)
        await asyncio.to_thread(self._write, key, body, content_type or DEFAULT_CONTENT_TYPE)
        logger.debug("Stored %s (%d bytes)", key, len(body))
        return True

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)
