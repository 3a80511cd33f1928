# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial schema.

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-06-02

Creates:
- users, user_expertise: identity directory
- questions, chat_sessions, chat_messages: routing and chat
- moderation_records: redaction audit trail
- banned_addresses: access guard address list
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def upgrade() -> None:
    """Create all tables."""
    # ==========================================================================
    # 1. Identity directory
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("is_banned", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("banned_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_expertise",
        sa.Column("id", sa.Integer, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("term", sa.String(255), nullable=False),
        sa.Column("position", sa.Integer, nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_user_expertise"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_user_expertise_user_id_users",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("user_id", "term", name="uq_user_expertise_user_id"),
    )
    op.create_index("ix_user_expertise_user_id", "user_expertise", ["user_id"])
    op.create_index("ix_user_expertise_term", "user_expertise", ["term"])

    # ==========================================================================
    # 2. Questions and chat
    # ==========================================================================
    op.create_table(
        "questions",
        sa.Column("id", sa.Integer, autoincrement=True, nullable=False),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("topic", sa.String(255), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("asked_by", sa.String(255), nullable=False),
        sa.Column("assigned_to", sa.String(255), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_questions"),
    )
    op.create_index("ix_questions_session_id", "questions", ["session_id"], unique=True)
    op.create_index("ix_questions_asked_by", "questions", ["asked_by"])
    op.create_index("ix_questions_assigned_to", "questions", ["assigned_to"])

    op.create_table(
        "chat_sessions",
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("ended", sa.Boolean, server_default=sa.false(), nullable=False),
        sa.Column("message_count", sa.Integer, server_default="0", nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("session_id", name="pk_chat_sessions"),
    )

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Integer, autoincrement=True, nullable=False),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("sequence", sa.Integer, nullable=False),
        sa.Column("sender", sa.String(255), nullable=False),
        sa.Column("original_text", sa.Text, nullable=False),
        sa.Column("stored_text", sa.Text, nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_chat_messages"),
        sa.ForeignKeyConstraint(
            ["session_id"],
            ["chat_sessions.session_id"],
            name="fk_chat_messages_session_id_chat_sessions",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("session_id", "sequence", name="uq_chat_messages_session_id"),
    )
    op.create_index("ix_chat_messages_session_id", "chat_messages", ["session_id"])

    # ==========================================================================
    # 3. Moderation and access control
    # ==========================================================================
    op.create_table(
        "moderation_records",
        sa.Column("id", sa.Integer, autoincrement=True, nullable=False),
        sa.Column("message_id", sa.Integer, nullable=False),
        sa.Column("session_id", sa.String(64), nullable=False),
        sa.Column("sender", sa.String(255), nullable=False),
        sa.Column("original_text", sa.Text, nullable=False),
        sa.Column("redacted_text", sa.Text, nullable=False),
        sa.Column("offending_token", sa.Text, nullable=False),
        sa.Column("moderated_participant", sa.Integer, nullable=True),
        sa.Column("asker_snapshot", sa.JSON, nullable=False),
        sa.Column("expert_snapshot", sa.JSON, nullable=False),
        sa.Column("question_topic", sa.String(255), nullable=True),
        sa.Column("question_body", sa.Text, nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_moderation_records"),
        sa.ForeignKeyConstraint(
            ["message_id"],
            ["chat_messages.id"],
            name="fk_moderation_records_message_id_chat_messages",
            ondelete="RESTRICT",
        ),
        sa.UniqueConstraint("message_id", name="uq_moderation_records_message_id"),
    )
    op.create_index("ix_moderation_records_session_id", "moderation_records", ["session_id"])

    op.create_table(
        "banned_addresses",
        sa.Column("id", sa.Integer, autoincrement=True, nullable=False),
        sa.Column("address", sa.String(64), nullable=False),
        sa.Column("reason", sa.String(500), nullable=False),
        sa.Column("banned_by", sa.String(255), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_banned_addresses"),
    )
    op.create_index("ix_banned_addresses_address", "banned_addresses", ["address"], unique=True)


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("banned_addresses")
    op.drop_table("moderation_records")
    op.drop_table("chat_messages")
    op.drop_table("chat_sessions")
    op.drop_table("questions")
    op.drop_table("user_expertise")
    op.drop_table("users")
