# Public DB API exports
from .settings import DBSettings, get_db_settings
from .engine import DBEngine
from .base import Base
from .models import CacheEntry, Document, Session, User
from .schema import create_all, make_sqlite_memory_engine
from .health import db_healthcheck
from .cache import BaseCache, SqlCache
from .search import query_prefix, search_clause, search_patterns
from .pagination import Page, after_cursor, decode_cursor, encode_cursor

__all__ = [
    "DBSettings",
    "get_db_settings",
    "DBEngine",
    "Base",
    "User",
    "Session",
    "Document",
    "CacheEntry",
    "create_all",
    "make_sqlite_memory_engine",
    "db_healthcheck",
    "BaseCache",
    "SqlCache",
    "query_prefix",
    "search_clause",
    "search_patterns",
    "Page",
    "encode_cursor",
    "decode_cursor",
    "after_cursor",
]
