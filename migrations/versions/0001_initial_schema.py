"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- status_history ---
    op.create_table(
        "status_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("raw_input", sa.Text(), nullable=False),
        sa.Column("processed_status", sa.Text(), nullable=False,
                  comment="JSON-encoded StatusSnapshot"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_status_history_id", "status_history", ["id"])
    op.create_index("ix_status_history_user_id", "status_history", ["user_id"])

    # --- latest_status ---
    op.create_table(
        "latest_status",
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("raw_input", sa.Text(), nullable=False),
        sa.Column("processed_status", sa.Text(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("user_id"),
    )

    # --- user_profiles ---
    op.create_table(
        "user_profiles",
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("theme", sa.String(32), nullable=False, server_default="default"),
        sa.Column("visibility", sa.String(16), nullable=False, server_default="public"),
        sa.Column("custom_emojis", sa.Text(), nullable=False, server_default="{}",
                  comment="JSON object: lowercased state name -> emoji"),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )

    # --- activities ---
    op.create_table(
        "activities",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("creator", sa.String(64), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("activity_type", sa.String(32), nullable=False, server_default="general"),
        sa.Column("max_participants", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("participants", sa.Text(), nullable=False, server_default="[]",
                  comment="JSON array of user ids, creator first"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_activities_creator", "activities", ["creator"])

    # --- status_templates ---
    op.create_table(
        "status_templates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name_key", sa.String(128), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("emoji", sa.String(16), nullable=False, server_default="📝"),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("template_text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "name_key", name="uq_status_template_user_name"),
    )
    op.create_index("ix_status_templates_id", "status_templates", ["id"])
    op.create_index("ix_status_templates_user_id", "status_templates", ["user_id"])


def downgrade() -> None:
    op.drop_table("status_templates")
    op.drop_table("activities")
    op.drop_table("user_profiles")
    op.drop_table("latest_status")
    op.drop_table("status_history")
