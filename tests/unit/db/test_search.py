from __future__ import annotations

import pytest
from sqlalchemy import select

from svc_content.db import Document, query_prefix, search_clause, search_patterns


def test_patterns_for_two_characters():
    assert search_patterns("ab") == ["ab%", "a%", "%b%", "%ab%"]


def test_patterns_for_single_character_skip_masked_last():
    assert search_patterns("a") == ["a%", "%a%"]


def test_patterns_mask_every_position():
    assert search_patterns("abc") == ["abc%", "ab%", "a%c%", "%bc%", "%abc%"]


def test_query_prefix_lines_up_binds_with_placeholders():
    query, bindings = query_prefix("ab")
    assert query == "name like ? or name like ? or name like ? or name like ?"
    assert bindings == ["ab%", "a%", "%b%", "%ab%"]
    assert query.count("?") == len(bindings)


def test_query_prefix_custom_column():
    query, _ = query_prefix("x", column="email")
    assert query == "email like ? or email like ?"


@pytest.mark.asyncio
async def test_search_clause_matches_substrings(engine):
    async with engine.transaction() as s:
        for i, name in enumerate(["ab", "abc", "xabx", "zzz"]):
            s.add(Document(model="pages", name=name, value="{}", modified_at=i))

    async with engine.session() as s:
        names = set(
            (await s.scalars(select(Document.name).where(search_clause(Document.name, "ab")))).all()
        )

    assert {"ab", "abc", "xabx"} <= names
    assert "zzz" not in names
