from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import and_, or_

from svc_content.exceptions import ValidationError


@dataclass
class Page:
    """One page of a listing.

    ``last`` is only set when the page came back full; a short page means
    there is nothing left to fetch.
    """

    results: list[dict[str, Any]] = field(default_factory=list)
    last: Optional[str] = None


def encode_cursor(sort_key: str, row_id: Any) -> str:
    raw = f"{sort_key}|{row_id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> tuple[str, str]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise ValidationError("Invalid cursor.") from exc
    # names may contain '|', the row id never does
    sort_key, sep, row_id = raw.rpartition("|")
    if not sep or not row_id:
        raise ValidationError("Invalid cursor.")
    return sort_key, row_id


def after_cursor(cursor: Optional[str], sort_column, id_column=None, *, id_type=int):
    """Keyset condition selecting rows strictly after ``cursor``.

    Rows are expected to be ordered by ``(sort_column, id_column)``. When the
    sort column is itself unique, pass no ``id_column``.
    """
    if not cursor:
        return None
    sort_key, row_id = decode_cursor(cursor)
    if id_column is None:
        return sort_column > sort_key
    try:
        ident = id_type(row_id)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid cursor.") from exc
    return or_(sort_column > sort_key, and_(sort_column == sort_key, id_column > ident))


def page_of(rows: list[Any], limit: int, results: list[dict[str, Any]], *, sort_key, row_id) -> Page:
    """Build a :class:`Page`, emitting a cursor only for a full page."""
    last = None
    if rows and len(rows) == limit:
        tail = rows[-1]
        last = encode_cursor(sort_key(tail), row_id(tail))
    return Page(results=results, last=last)


__all__ = ["Page", "encode_cursor", "decode_cursor", "after_cursor", "page_of"]
