from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from starlette.responses import Response

from svc_content import utils
from svc_content.db.models import Session, User
from svc_content.exceptions import UnauthorizedError

from .. import responses
from ..context import RequestContext

if TYPE_CHECKING:
    from ..pipeline import Pipeline

logger = logging.getLogger(__name__)


def session_cookie(key: str) -> str:
    return f"session={key}; SameSite=Strict"


def add_sessions_routes(pipeline: "Pipeline") -> None:
    @pipeline.get("/api/session")
    async def read_session(ctx: RequestContext) -> Response:
        if not ctx.user:
            return responses.unauthorized()
        return responses.json({"email": ctx.user})

    @pipeline.post("/api/session")
    async def create_session(ctx: RequestContext) -> Response:
        body = ctx.body if isinstance(ctx.body, dict) else {}
        email = body.get("email")
        verification = str(body.get("verification") or "")
        if not email or not verification:
            raise UnauthorizedError("Email and verification code are required.")
        now = utils.now()

        async with ctx.db.transaction() as s:
            existing = await s.scalar(
                select(User.email).where(
                    User.email == email,
                    User.verification == verification,
                    User.verification_expires_at > now,
                )
            )
            if not existing:
                raise UnauthorizedError("Invalid or expired verification code.")

            await s.execute(delete(Session).where(Session.email == email, Session.expires_at < now))
            key = utils.new_key()
            s.add(Session(key=key, email=email, expires_at=now + ctx.settings.session_lifetime_seconds))

        logger.info("Session created for %s", email)
        return Response(status_code=201, headers={"set-cookie": session_cookie(key)})

    @pipeline.delete("/api/session")
    async def delete_session(ctx: RequestContext) -> Response:
        if not ctx.user:
            return responses.unauthorized()
        if not ctx.session:
            return responses.bad_request()
        async with ctx.db.transaction() as s:
            await s.execute(delete(Session).where(Session.key == ctx.session))
        response = responses.success(True)
        response.headers["set-cookie"] = "session=; Max-Age=0; SameSite=Strict"
        return response
