from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from starlette.responses import Response

from svc_content.controllers import call
from svc_content.exceptions import ConflictError, ValidationError

from .. import responses
from ..context import RequestContext

if TYPE_CHECKING:
    from ..pipeline import Pipeline

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_SEARCH_LIMIT = 10
TRUTHY = {"1", "true", "yes", "on"}


def _target(ctx: RequestContext) -> tuple[str, str]:
    return ctx.parameters.get("model", ""), ctx.parameters.get("*", "")


def _limit(ctx: RequestContext, search: Optional[str]) -> int:
    raw = ctx.queries.get("limit")
    if not raw:
        return DEFAULT_SEARCH_LIMIT if search else DEFAULT_LIMIT
    try:
        limit = int(raw)
    except ValueError as exc:
        raise ValidationError("limit must be an integer.") from exc
    if limit < 1:
        raise ValidationError("limit must be positive.")
    return limit


async def _put_value(ctx: RequestContext) -> Any:
    if ctx.body_is_json:
        return ctx.body
    return await ctx.read_body()


def add_documents_routes(pipeline: "Pipeline") -> None:
    controllers = pipeline.controllers

    @pipeline.head("/api/:model/*")
    async def document_exists(ctx: RequestContext) -> Response:
        if not ctx.user:
            return responses.unauthorized()
        model, name = _target(ctx)
        if not model or not name:
            return responses.not_found()
        if not await call(ctx, controllers, model, "exists", name=name):
            return responses.not_found()
        return responses.no_content()

    @pipeline.get("/api/:model")
    async def list_documents(ctx: RequestContext) -> Response:
        if not ctx.user:
            return responses.unauthorized()
        model = ctx.parameters.get("model")
        if not model:
            return responses.not_found()
        search = ctx.queries.get("search") or None
        limit = _limit(ctx, search)
        after = ctx.queries.get("after") or None

        page = await call(ctx, controllers, model, "list", search=search, limit=limit, after=after)
        return responses.json(page.results, {"x-last": page.last})

    @pipeline.get("/api/:model/*")
    async def get_document(ctx: RequestContext) -> Response:
        if not ctx.user:
            return responses.unauthorized()
        model, name = _target(ctx)
        if not model or not name:
            return responses.not_found()

        result = await call(ctx, controllers, model, "get", name=name)
        if isinstance(result, Response):
            return result
        if not result:
            return responses.not_found()
        return responses.json(result)

    @pipeline.put("/api/:model/*")
    async def put_document(ctx: RequestContext) -> Response:
        if not ctx.can_write:
            return responses.unauthorized()
        model, name = _target(ctx)
        if not model or not name:
            return responses.not_found()

        rename = ctx.queries.get("rename") or None
        move = ctx.queries.get("move") or None
        overwrite = ctx.queries.get("overwrite", "").lower() in TRUTHY
        if move and move != model and (move in controllers or model in controllers):
            raise ValidationError(f"Documents cannot be moved between '{model}' and '{move}'.")
        value = await _put_value(ctx)
        if value is None or value == b"":
            return responses.bad_request("Request body is required.")

        kwargs = {"name": name, "value": value, "modified_by": ctx.user, "rename": rename, "move": move}
        try:
            ok = await call(ctx, controllers, model, "put", **kwargs)
        except ConflictError as exc:
            if not overwrite:
                return responses.conflict(exc)
            target_model = exc.context.get("model", move or model)
            target_name = exc.context.get("name", rename or name)
            logger.info("Overwriting %s/%s by request of %s", target_model, target_name, ctx.user)
            await call(ctx, controllers, target_model, "delete", name=target_name)
            ok = await call(ctx, controllers, model, "put", **kwargs)
        if not ok:
            raise RuntimeError(f"Unable to update document {model}/{name}.")
        return responses.no_content()

    @pipeline.delete("/api/:model/*")
    async def delete_document(ctx: RequestContext) -> Response:
        if not ctx.can_write:
            return responses.unauthorized()
        model, name = _target(ctx)
        if not model or not name:
            return responses.not_found()
        if not await call(ctx, controllers, model, "delete", name=name):
            return responses.not_found()
        return responses.no_content()
