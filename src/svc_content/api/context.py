from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

import httpx
from starlette.requests import Request

from svc_content.app.settings import AppSettings
from svc_content.db.cache import BaseCache
from svc_content.db.engine import DBEngine
from svc_content.mailer import EmailSender
from svc_content.storage.base import ObjectStorage

if TYPE_CHECKING:
    from .assets import AssetServer

BEARER_PREFIX = "Bearer "

# None: not checked yet, str: resolved identity, False: checked and absent
Identity = Union[str, bool, None]


@dataclass
class Environment:
    """Process-wide collaborators, built once at startup and shared read-only."""

    settings: AppSettings
    db: DBEngine
    cache: BaseCache
    storage: ObjectStorage
    mailer: EmailSender
    assets: Optional["AssetServer"] = None
    http: Optional[httpx.AsyncClient] = None


@dataclass
class RequestContext:
    request: Request
    environment: Environment
    headers: Mapping[str, str]
    queries: dict[str, str]
    parameters: dict[str, str]
    cache: BaseCache
    body: Any = None
    body_is_json: bool = False
    user: Identity = None
    session: Optional[str] = None
    token: Optional[str] = None
    # resolver-provided values, e.g. the commerce plugin's store client
    extras: dict[str, Any] = field(default_factory=dict)

    @property
    def db(self) -> DBEngine:
        return self.environment.db

    @property
    def settings(self) -> AppSettings:
        return self.environment.settings

    @property
    def can_write(self) -> bool:
        return bool(self.user) and not self.environment.settings.demo

    async def read_body(self) -> bytes:
        # Starlette caches the body, so this also works after the JSON parse.
        return await self.request.body()


def parse_bearer(header: Optional[str]) -> Optional[str]:
    if header and header.startswith(BEARER_PREFIX):
        token = header[len(BEARER_PREFIX):].strip()
        return token or None
    return None


def is_json(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() == "application/json"
