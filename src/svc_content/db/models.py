from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class User(Base):
    """Directory entry. ``key`` is the long-lived bearer token, set once at creation."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), primary_key=True)
    key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    verification: Mapped[Optional[str]] = mapped_column(String(16), default=None)
    verification_expires_at: Mapped[Optional[int]] = mapped_column(Integer, default=None)


class Session(Base):
    __tablename__ = "sessions"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(
        String(320), ForeignKey("users.email", ondelete="CASCADE"), index=True, nullable=False
    )
    expires_at: Mapped[int] = mapped_column(Integer, nullable=False)


class Document(Base):
    """One JSON value per (model, name); ``id`` survives renames."""

    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("model", "name", name="uq_documents_model_name"),
        Index("ix_documents_model_name_id", "model", "name", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    model: Mapped[str] = mapped_column(String(120), nullable=False)
    name: Mapped[str] = mapped_column(String(1024), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    modified_at: Mapped[int] = mapped_column(Integer, nullable=False)
    modified_by: Mapped[Optional[str]] = mapped_column(String(320), default=None)


class CacheEntry(Base):
    __tablename__ = "cache"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
