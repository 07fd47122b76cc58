"""
SQLAlchemy models for billing entries.

Tables:
- users: User billing accounts (plan, subscription, contact metadata, roles)
- guilds: Guild billing accounts (plan, subscription)

Plans and subscriptions are stored as JSONB documents and replaced wholesale
on every write.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    plan: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONB, nullable=True)
    subscription: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONB, nullable=True)
    # `metadata` is reserved on declarative classes
    user_metadata: Mapped[Dict[str, Any]] = mapped_column("metadata", JSONB, nullable=False, default=dict)
    roles: Mapped[List[str]] = mapped_column(JSONB, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class GuildModel(Base):
    __tablename__ = "guilds"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    plan: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONB, nullable=True)
    subscription: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


__all__ = ["Base", "UserModel", "GuildModel"]
