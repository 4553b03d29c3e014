from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
import jwt
from starlette.responses import RedirectResponse, Response

from svc_content.api import responses
from svc_content.api.context import RequestContext
from svc_content.exceptions import StoreRequestError

from .client import StoreClient

if TYPE_CHECKING:
    from svc_content.api.pipeline import Pipeline

logger = logging.getLogger(__name__)

STORE_CACHE_KEY = "bigcommerce-store"
TOKEN_URL = "https://login.bigcommerce.com/oauth2/token"


async def _exchange_code(ctx: RequestContext, payload: dict) -> httpx.Response:
    headers = {"accept": "application/json"}
    if ctx.environment.http is not None:
        return await ctx.environment.http.post(TOKEN_URL, json=payload, headers=headers)
    async with httpx.AsyncClient(timeout=30.0) as client:
        return await client.post(TOKEN_URL, json=payload, headers=headers)


async def resolve_store_token(ctx: RequestContext) -> None:
    """Accept store-signed JWTs as identity and attach the installed store."""
    secret = ctx.settings.bigcommerce_client_secret
    if not ctx.token or secret is None:
        return
    try:
        payload = jwt.decode(
            ctx.token,
            secret.get_secret_value(),
            algorithms=["HS256"],
            options={"verify_aud": False},
        )
    except jwt.PyJWTError:
        return
    email = (payload.get("user") or {}).get("email")
    if not email:
        return
    if not ctx.user:
        ctx.user = email
    store = await ctx.cache.get(STORE_CACHE_KEY)
    if store:
        ctx.extras["store"] = StoreClient(
            store["hash"],
            store["token"],
            client=ctx.environment.http,
            batch_size=ctx.settings.bigcommerce_batch_size,
        )


def add_bigcommerce_authentication(pipeline: "Pipeline") -> None:
    pipeline.register_middleware(resolve_store_token)


def add_bigcommerce_routes(pipeline: "Pipeline") -> None:
    @pipeline.get("/install")
    async def install(ctx: RequestContext) -> Response:
        settings = ctx.settings
        if not settings.bigcommerce_enabled:
            return responses.bad_request("Missing environment variables.")

        code = ctx.queries.get("code")
        context = ctx.queries.get("context")
        scope = ctx.queries.get("scope")
        if not code or not context or not scope:
            return responses.bad_request("Missing required query parameters.")

        parts = context.split("/")
        store_hash = parts[1] if len(parts) > 1 else ""
        if not store_hash:
            return responses.bad_request("Missing store hash.")

        redirect_uri = ctx.request.url.replace(scheme="https", path="/install", query="")
        resp = await _exchange_code(
            ctx,
            {
                "client_id": settings.bigcommerce_client_id,
                "client_secret": settings.bigcommerce_client_secret.get_secret_value(),
                "code": code,
                "context": context,
                "scope": scope,
                "grant_type": "authorization_code",
                "redirect_uri": str(redirect_uri),
            },
        )
        logger.info("POST %s - %s %s", TOKEN_URL, resp.status_code, resp.reason_phrase)
        if resp.is_error:
            raise StoreRequestError("post", TOKEN_URL, resp.status_code, resp.text)
        token = resp.json()

        if not await ctx.cache.put(STORE_CACHE_KEY, {"hash": store_hash, "token": token["access_token"]}):
            raise RuntimeError("Unable to complete store installation.")
        logger.info("Store %s installed", store_hash)
        return RedirectResponse("/", status_code=302)

    @pipeline.get("/uninstall")
    async def uninstall(ctx: RequestContext) -> Response:
        if "store" not in ctx.extras:
            return responses.unauthorized()
        await ctx.cache.delete(STORE_CACHE_KEY)
        logger.info("Store %s uninstalled", ctx.extras["store"].hash)
        return responses.no_content()


def add_bigcommerce(pipeline: "Pipeline") -> None:
    add_bigcommerce_authentication(pipeline)
    add_bigcommerce_routes(pipeline)
