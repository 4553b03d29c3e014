from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import Response

from .. import responses
from ..context import RequestContext

if TYPE_CHECKING:
    from ..pipeline import Pipeline


def _key(ctx: RequestContext) -> str:
    return ctx.parameters.get("*", "")


async def _head(ctx: RequestContext) -> Response:
    key = _key(ctx)
    if not key:
        return responses.not_found()
    obj = await ctx.environment.storage.head(key)
    if obj is None:
        return responses.not_found()
    return responses.no_content()


async def _get(ctx: RequestContext) -> Response:
    key = _key(ctx)
    if not key:
        return responses.not_found()
    obj = await ctx.environment.storage.get(key)
    if obj is None:
        return responses.not_found()
    return Response(obj.body, media_type=obj.content_type)


def add_files_routes(pipeline: "Pipeline") -> None:
    pipeline.register_route("HEAD", "/files/*", _head)
    pipeline.register_route("GET", "/files/*", _get)

    @pipeline.head("/api/files/*")
    async def file_exists(ctx: RequestContext) -> Response:
        if not ctx.user:
            return responses.unauthorized()
        return await _head(ctx)

    @pipeline.get("/api/files/*")
    async def get_file(ctx: RequestContext) -> Response:
        if not ctx.user:
            return responses.unauthorized()
        return await _get(ctx)

    @pipeline.put("/api/files/*")
    async def put_file(ctx: RequestContext) -> Response:
        if not ctx.can_write:
            return responses.unauthorized()
        key = _key(ctx)
        if not key:
            return responses.not_found()
        body = await ctx.read_body()
        if not await ctx.environment.storage.put(key, body, ctx.headers.get("content-type")):
            raise RuntimeError(f"Unable to upsert file {key}.")
        return responses.no_content()

    @pipeline.delete("/api/files/*")
    async def delete_file(ctx: RequestContext) -> Response:
        if not ctx.can_write:
            return responses.unauthorized()
        key = _key(ctx)
        if not key:
            return responses.not_found()
        await ctx.environment.storage.delete(key)
        return responses.no_content()
