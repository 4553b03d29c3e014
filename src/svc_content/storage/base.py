from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterable, Optional, Protocol, Union

from svc_content.exceptions import ValidationError

DEFAULT_CONTENT_TYPE = "application/octet-stream"

Body = Union[bytes, AsyncIterable[bytes]]


class InvalidKeyError(ValidationError):
    pass


@dataclass
class StoredObject:
    key: str
    content_type: str
    size: int
    body: bytes = b""


class ObjectStorage(Protocol):
    """Opaque key -> bytes store used by the file routes."""

    async def head(self, key: str) -> Optional[StoredObject]:
        ...

    async def get(self, key: str) -> Optional[StoredObject]:
        ...

    async def put(self, key: str, data: Body, content_type: Optional[str] = None) -> bool:
        ...

    async def delete(self, key: str) -> None:
        ...


def validate_key(key: str) -> str:
    if not key or key.startswith("/") or "\\" in key:
        raise InvalidKeyError(f"Invalid file key: {key!r}")
    if any(part in ("", ".", "..") for part in key.split("/")):
        raise InvalidKeyError(f"Invalid file key: {key!r}")
    return key


async def read_body(data: Body) -> bytes:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    chunks = [chunk async for chunk in data]
    return b"".join(chunks)
