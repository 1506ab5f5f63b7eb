"""Initial schema for the remote store.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

Creates:
- users: profile fields (name, role, plan)
- documents: extracted plain text of uploaded files
- schedule_events: per-user calendar entries
- chat_messages: one ordered transcript per user
- system_settings: process-wide key/value settings
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    # ==========================================================================
    # USERS TABLE
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=True, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="user"),
        sa.Column("plan", sa.String(), nullable=False, server_default="free"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
        sa.CheckConstraint("plan IN ('free', 'pro', 'campus')", name="ck_users_plan"),
    )

    # ==========================================================================
    # DOCUMENTS TABLE
    # ==========================================================================
    op.create_table(
        "documents",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("kind", sa.String(), nullable=False),  # pdf, docx, txt
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_documents_owner_id", "documents", ["owner_id"])

    # ==========================================================================
    # SCHEDULE EVENTS TABLE
    # ==========================================================================
    op.create_table(
        "schedule_events",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("category", sa.String(), nullable=False, server_default="general"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_schedule_events_owner_id", "schedule_events", ["owner_id"])

    # ==========================================================================
    # CHAT MESSAGES TABLE
    # ==========================================================================
    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),  # user, assistant
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("is_error", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("format", sa.String(), nullable=True),
        sa.Column("suggestions", JSONType, nullable=False, server_default="[]"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("idx_chat_messages_owner_position", "chat_messages", ["owner_id", "position"])

    # ==========================================================================
    # SYSTEM SETTINGS TABLE
    # ==========================================================================
    op.create_table(
        "system_settings",
        sa.Column("key", sa.String(), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("system_settings")
    op.drop_index("idx_chat_messages_owner_position", table_name="chat_messages")
    op.drop_table("chat_messages")
    op.drop_index("idx_schedule_events_owner_id", table_name="schedule_events")
    op.drop_table("schedule_events")
    op.drop_index("idx_documents_owner_id", table_name="documents")
    op.drop_table("documents")
    op.drop_table("users")
