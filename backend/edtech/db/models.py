"""
SQLAlchemy 2.0 Models for the remote store.

Uses modern declarative syntax with Mapped[] type annotations.
Column types are portable (Uuid, JSON) so the same models run against
Postgres in production and SQLite in tests.

Owner ids are indexed but carry no foreign key: profiles are provisioned
by the identity layer and may not have a row here.
"""

import datetime as dt
from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Boolean,
    CheckConstraint,
    Date,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from edtech.db.base import Base

# JSONB on Postgres, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


# =============================================================================
# MODELS
# =============================================================================


class User(Base):
    """
    User profile.

    Identity is provisioned elsewhere; this table only holds the profile
    fields the assistant needs (display name, role, plan).
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
        CheckConstraint("plan IN ('free', 'pro', 'campus')", name="ck_users_plan"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    email: Mapped[Optional[str]] = mapped_column(String(320), unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(), nullable=False, server_default="user")
    plan: Mapped[str] = mapped_column(String(), nullable=False, server_default="free")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class Document(Base):
    """
    Uploaded document with its extracted plain text.

    Never mutated after insert; only the owner deletes it.
    """

    __tablename__ = "documents"
    __table_args__ = (Index("idx_documents_owner_id", "owner_id"),)

    id: Mapped[UUID] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    owner_id: Mapped[UUID] = mapped_column(Uuid(), nullable=False)
    name: Mapped[str] = mapped_column(String(), nullable=False)
    kind: Mapped[str] = mapped_column(String(), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


class ScheduleEvent(Base):
    """Calendar entry owned by a user. Created and deleted, never updated."""

    __tablename__ = "schedule_events"
    __table_args__ = (Index("idx_schedule_events_owner_id", "owner_id"),)

    id: Mapped[UUID] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    owner_id: Mapped[UUID] = mapped_column(Uuid(), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    category: Mapped[str] = mapped_column(String(), nullable=False, server_default="general")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


class ChatMessage(Base):
    """
    One message of a user's transcript.

    A user has exactly one transcript; `position` is the order within it.
    The whole transcript is replaced on every save.
    """

    __tablename__ = "chat_messages"
    __table_args__ = (Index("idx_chat_messages_owner_position", "owner_id", "position"),)

    id: Mapped[UUID] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    owner_id: Mapped[UUID] = mapped_column(Uuid(), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[str] = mapped_column(String(), nullable=False)  # 'user' or 'assistant'
    text: Mapped[str] = mapped_column(Text, nullable=False)
    is_error: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    format: Mapped[Optional[str]] = mapped_column(String(), nullable=True)
    suggestions: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)


class SystemSetting(Base):
    """Process-wide key/value settings (the system instruction lives here)."""

    __tablename__ = "system_settings"

    key: Mapped[str] = mapped_column(String(), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class UsageStat(Base):
    """Process-wide usage counter ('docs', 'queries')."""

    __tablename__ = "usage_stats"

    key: Mapped[str] = mapped_column(String(), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
