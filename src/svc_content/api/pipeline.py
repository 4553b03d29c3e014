from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from svc_content.controllers import ControllerRegistry, default_registry
from svc_content.exceptions import ContentError, ValidationError

from . import responses
from .context import Environment, RequestContext, is_json, parse_bearer
from .router import Handler, Router

logger = logging.getLogger(__name__)

Resolver = Callable[[RequestContext], Awaitable[None]]


@dataclass
class PipelineConfig:
    """Everything registered at startup: routes, resolvers and controllers."""

    router: Router = field(default_factory=Router)
    resolvers: list[Resolver] = field(default_factory=list)
    controllers: ControllerRegistry = field(default_factory=default_registry)


class Pipeline:
    """ASGI app: build a context, resolve identity, dispatch, map errors.

    Registration happens through :meth:`register_route` and
    :meth:`register_middleware` before :meth:`freeze`; afterwards the config
    is shared read-only by every request.
    """

    def __init__(self, environment: Environment, config: Optional[PipelineConfig] = None):
        self.environment = environment
        self.config = config or PipelineConfig()
        self._frozen = False

    @property
    def controllers(self) -> ControllerRegistry:
        return self.config.controllers

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_open(self) -> None:
        if self._frozen:
            raise RuntimeError("Pipeline is frozen; register routes and middleware during startup.")

    # Registration

    def register_route(self, method: str, pattern: str, handler: Optional[Handler] = None):
        self._ensure_open()
        if handler is not None:
            self.config.router.add(method, pattern, handler)
            return handler

        def decorator(fn: Handler) -> Handler:
            self._ensure_open()
            self.config.router.add(method, pattern, fn)
            return fn

        return decorator

    def head(self, pattern: str):
        return self.register_route("HEAD", pattern)

    def get(self, pattern: str):
        return self.register_route("GET", pattern)

    def post(self, pattern: str):
        return self.register_route("POST", pattern)

    def put(self, pattern: str):
        return self.register_route("PUT", pattern)

    def delete(self, pattern: str):
        return self.register_route("DELETE", pattern)

    def register_middleware(self, resolver: Resolver) -> Resolver:
        self._ensure_open()
        self.config.resolvers.append(resolver)
        return resolver

    def freeze(self) -> "Pipeline":
        self.config.router.freeze()
        self.config.controllers.freeze()
        self._frozen = True
        return self

    # Request handling

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return
        request = Request(scope, receive=receive)
        response = await self.handle(request)
        await response(scope, receive, send)

    @staticmethod
    def _route_path(scope: Scope) -> str:
        path = scope.get("path") or "/"
        root = scope.get("root_path") or ""
        if root and path.startswith(root):
            path = path[len(root):] or "/"
        return path

    async def build_context(self, request: Request, params: dict[str, str]) -> RequestContext:
        headers = request.headers
        body: Any
        body_is_json = is_json(headers.get("content-type"))
        if body_is_json:
            raw = await request.body()
            try:
                body = json.loads(raw) if raw else None
            except ValueError as exc:
                raise ValidationError("Malformed JSON body.") from exc
        else:
            body = request.stream()

        return RequestContext(
            request=request,
            environment=self.environment,
            headers=headers,
            queries=dict(request.query_params),
            parameters=params,
            cache=self.environment.cache,
            body=body,
            body_is_json=body_is_json,
            session=request.cookies.get("session") or None,
            token=parse_bearer(headers.get("authorization")),
        )

    async def handle(self, request: Request) -> Response:
        path = self._route_path(request.scope)
        match = self.config.router.find(request.method, path)
        if match is None:
            return await self._fallback(request)

        extra = {"http_method": request.method, "path": path}
        try:
            ctx = await self.build_context(request, match.params)
            for resolver in self.config.resolvers:
                await resolver(ctx)
            if ctx.user is None:
                ctx.user = False
            response = await match.handler(ctx)
        except ContentError as exc:
            if exc.fatal:
                logger.exception("%s on %s %s", type(exc).__name__, request.method, path, extra=extra)
                return Response(status_code=500)
            logger.debug("%s on %s %s: %s", type(exc).__name__, request.method, path, exc.detail, extra=extra)
            return responses.error(exc)
        except Exception as exc:
            logger.exception("%s on %s %s (500)", type(exc).__name__, request.method, path, extra=extra)
            return Response(status_code=500)

        logger.debug("%s %s -> %s", request.method, path, response.status_code, extra={**extra, "user": ctx.user or None})
        return response

    async def _fallback(self, request: Request) -> Response:
        # Browser navigation to unknown paths goes to the client-side app.
        assets = self.environment.assets
        if assets is not None and "text/html" in request.headers.get("accept", ""):
            return await assets.entry_point()
        return responses.not_found()
