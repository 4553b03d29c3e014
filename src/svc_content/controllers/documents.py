from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from svc_content import utils
from svc_content.db.models import Document
from svc_content.db.pagination import Page, after_cursor, page_of
from svc_content.db.search import search_clause
from svc_content.exceptions import ConflictError, NotFoundError, ValidationError

from .base import Controller

if TYPE_CHECKING:
    from svc_content.api.context import RequestContext

logger = logging.getLogger(__name__)

# Derived on read; never trusted from a client payload.
RESERVED_FIELDS = ("_modified_at", "_model", "_name", "_id")


def _coerce_value(value: Any) -> dict[str, Any]:
    if isinstance(value, (bytes, bytearray)):
        try:
            value = json.loads(value)
        except ValueError as exc:
            raise ValidationError("Document body must be JSON.") from exc
    if not isinstance(value, dict):
        raise ValidationError("Document value must be a JSON object.")
    return {k: v for k, v in value.items() if k not in RESERVED_FIELDS}


async def list_documents(
    ctx: "RequestContext",
    *,
    model: str,
    search: Optional[str] = None,
    limit: int = 20,
    after: Optional[str] = None,
) -> Page:
    stmt = select(Document.id, Document.name, Document.modified_at).where(Document.model == model)
    if search:
        stmt = stmt.where(search_clause(Document.name, search))
    cond = after_cursor(after, Document.name, Document.id)
    if cond is not None:
        stmt = stmt.where(cond)
    stmt = stmt.order_by(Document.name, Document.id).limit(limit)

    async with ctx.db.session() as s:
        rows = (await s.execute(stmt)).all()

    results = [{"name": row.name, "modified_at": row.modified_at} for row in rows]
    return page_of(rows, limit, results, sort_key=lambda r: r.name, row_id=lambda r: r.id)


async def document_exists(ctx: "RequestContext", *, model: str, name: str) -> bool:
    async with ctx.db.session() as s:
        row_id = await s.scalar(select(Document.id).where(Document.model == model, Document.name == name))
    return row_id is not None


async def get_document(ctx: "RequestContext", *, model: str, name: str) -> Optional[dict[str, Any]]:
    async with ctx.db.session() as s:
        row = (
            await s.execute(
                select(Document.id, Document.value, Document.modified_at).where(
                    Document.model == model, Document.name == name
                )
            )
        ).first()
    if row is None:
        return None
    return {
        **json.loads(row.value),
        "_modified_at": row.modified_at,
        "_model": model,
        "_name": name,
        "_id": row.id,
    }


async def _load_document(s: AsyncSession, model: str, name: str) -> Optional[Document]:
    return await s.scalar(select(Document).where(Document.model == model, Document.name == name))


async def _write_document(
    ctx: "RequestContext",
    document: dict[str, Any],
    *,
    model: str,
    name: str,
    modified_by: Optional[str],
    rename: Optional[str],
    move: Optional[str],
) -> None:
    target_model = move or model
    target_name = rename or name

    async with ctx.db.transaction() as s:
        existing = await _load_document(s, model, name)
        if existing is None and (rename or move):
            raise NotFoundError("Cannot rename nonexistent document.")

        if existing is not None and (target_model, target_name) != (model, name):
            clash = await s.scalar(
                select(Document.id).where(Document.model == target_model, Document.name == target_name)
            )
            if clash is not None:
                raise ConflictError(
                    f"'{target_name}' already exists in '{target_model}'.",
                    model=target_model,
                    name=target_name,
                )

        now = utils.now()
        serialized = json.dumps(
            {**document, "_modified_at": now, "_model": target_model, "_name": target_name}
        )
        if existing is not None:
            existing.model = target_model
            existing.name = target_name
            existing.value = serialized
            existing.modified_at = now
            existing.modified_by = modified_by
        else:
            s.add(
                Document(
                    model=model,
                    name=name,
                    value=serialized,
                    modified_at=now,
                    modified_by=modified_by,
                )
            )
        await s.flush()

    if existing is not None and (target_model, target_name) != (model, name):
        logger.info("Moved document %s/%s to %s/%s", model, name, target_model, target_name)


async def put_document(
    ctx: "RequestContext",
    *,
    model: str,
    name: str,
    value: Any,
    modified_by: Optional[str] = None,
    rename: Optional[str] = None,
    move: Optional[str] = None,
) -> bool:
    """Insert or update ``(model, name)``.

    ``rename``/``move`` retarget an existing document to another name/model;
    both raise :class:`ConflictError` when the target already exists.
    """
    document = _coerce_value(value)
    options = dict(model=model, name=name, modified_by=modified_by, rename=rename, move=move)
    try:
        await _write_document(ctx, document, **options)
    except IntegrityError:
        # A concurrent writer inserted (model, name) first; the second pass updates that row.
        logger.info("Concurrent insert of %s/%s; retrying as update", model, name)
        await _write_document(ctx, document, **options)
    return True


async def delete_document(ctx: "RequestContext", *, model: str, name: str) -> bool:
    async with ctx.db.transaction() as s:
        res = await s.execute(delete(Document).where(Document.model == model, Document.name == name))
    return bool(res.rowcount)


documents_controller = Controller(
    list=list_documents,
    exists=document_exists,
    get=get_document,
    put=put_document,
    delete=delete_document,
)
