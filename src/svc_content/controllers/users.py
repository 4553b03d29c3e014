from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import delete, select

from svc_content import utils
from svc_content.db.models import Session, User
from svc_content.db.pagination import Page, after_cursor, page_of
from svc_content.db.search import search_clause

from .base import Controller

if TYPE_CHECKING:
    from svc_content.api.context import RequestContext


async def list_users(
    ctx: "RequestContext",
    *,
    model: str,
    search: Optional[str] = None,
    limit: int = 20,
    after: Optional[str] = None,
) -> Page:
    stmt = select(User.email)
    if search:
        stmt = stmt.where(search_clause(User.email, search))
    cond = after_cursor(after, User.email)
    if cond is not None:
        stmt = stmt.where(cond)
    stmt = stmt.order_by(User.email).limit(limit)

    async with ctx.db.session() as s:
        emails = list((await s.scalars(stmt)).all())

    return page_of(emails, limit, [{"name": email} for email in emails], sort_key=lambda e: e, row_id=lambda e: 0)


async def user_exists(ctx: "RequestContext", *, model: str, name: str) -> bool:
    async with ctx.db.session() as s:
        email = await s.scalar(select(User.email).where(User.email == name))
    return email is not None


async def create_user(ctx: "RequestContext", *, model: str, name: str, value: Any = None, **_: Any) -> bool:
    """Create-only: an existing email is left untouched and reported as ``False``."""
    async with ctx.db.transaction() as s:
        if await s.scalar(select(User.email).where(User.email == name)) is not None:
            return False
        s.add(User(email=name, key=utils.new_key()))
        await s.flush()
    return True


async def delete_user(ctx: "RequestContext", *, model: str, name: str) -> bool:
    async with ctx.db.transaction() as s:
        await s.execute(delete(Session).where(Session.email == name))
        res = await s.execute(delete(User).where(User.email == name))
    return bool(res.rowcount)


users_controller = Controller(
    list=list_users,
    exists=user_exists,
    put=create_user,
    delete=delete_user,
)
