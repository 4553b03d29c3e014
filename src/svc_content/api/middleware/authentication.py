"""Identity resolvers. Each one leaves an already-resolved user alone and
records ``False`` when it checked a credential and found nothing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from svc_content import utils
from svc_content.db.models import Session, User

from ..context import RequestContext

if TYPE_CHECKING:
    from ..pipeline import Pipeline


async def resolve_session(ctx: RequestContext) -> None:
    if not ctx.session:
        return
    stmt = (
        select(Session.email)
        .join(User, User.email == Session.email)
        .where(Session.key == ctx.session, Session.expires_at > utils.now())
    )
    async with ctx.db.session() as s:
        email = await s.scalar(stmt)
    ctx.user = email or False


async def resolve_token(ctx: RequestContext) -> None:
    if ctx.user or not ctx.token:
        return
    async with ctx.db.session() as s:
        email = await s.scalar(select(User.email).where(User.key == ctx.token))
    ctx.user = email or False


def add_session_authentication(pipeline: "Pipeline") -> None:
    pipeline.register_middleware(resolve_session)


def add_token_authentication(pipeline: "Pipeline") -> None:
    pipeline.register_middleware(resolve_token)
