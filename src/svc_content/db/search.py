"""Substring search over a single text column using only ``like`` patterns.

The pattern set is a fuzzy approximation of "contains": the term as a
prefix, the term with any single character replaced by a wildcard (which
also tolerates a truncated last character), and a plain ``%term%``
fallback. Patterns keep their generation order so that bindings line up with
the ``?`` placeholders of :func:`query_prefix`.
"""

from __future__ import annotations

from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement


def search_patterns(term: str) -> list[str]:
    patterns = [f"{term}%"]
    last = len(term) - 1
    for i in range(last, -1, -1):
        masked = term[:i] + "%" + term[i + 1:]
        if i == last:
            if len(term) > 1:
                patterns.append(masked)
        else:
            patterns.append(f"{masked}%")
    patterns.append(f"%{term}%")
    return patterns


def query_prefix(term: str, column: str = "name") -> tuple[str, list[str]]:
    """Return a ``where`` fragment with positional ``?`` binds and its bindings."""
    bindings = search_patterns(term)
    query = " or ".join(f"{column} like ?" for _ in bindings)
    return query, bindings


def search_clause(column, term: str) -> ColumnElement[bool]:
    """Same disjunction as :func:`query_prefix`, built on a SQLAlchemy column."""
    return or_(*[column.like(pattern) for pattern in search_patterns(term)])


__all__ = ["search_patterns", "query_prefix", "search_clause"]
