"""Create users and rank_activity_logs tables

Revision ID: 20261019_rank_tables
Revises:
Create Date: 2026-10-19

This migration creates:
- users: one rank account per identity, holding the authoritative total_xp
- rank_activity_logs: the append-only XP ledger
- Indexes serving the daily-cap count and the most-recent-first history
- The (user_id, activity, reference_id) unique constraint used to
  deduplicate retried awards
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_rank_tables"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the rank tables and their indexes."""
    # === USERS ===
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("username", sa.String(), nullable=False, unique=True),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint("total_xp >= 0", name="ck_users_total_xp"),
    )
    op.create_index("ix_users_total_xp", "users", ["total_xp"])

    # === RANK ACTIVITY LOGS ===
    op.create_table(
        "rank_activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(length=64),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column("activity", sa.String(length=32), nullable=False),
        sa.Column("xp_gained", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reference_id", sa.String(), nullable=True),
        sa.Column("reference_type", sa.String(length=16), nullable=True),
        sa.UniqueConstraint(
            "user_id", "activity", "reference_id", name="_user_activity_reference_uc"
        ),
        sa.CheckConstraint("xp_gained > 0", name="ck_rank_activity_logs_xp_gained"),
    )
    op.create_index(
        "ix_rank_activity_logs_user_id", "rank_activity_logs", ["user_id"]
    )
    op.create_index(
        "ix_rank_activity_logs_user_activity_ts",
        "rank_activity_logs",
        ["user_id", "activity", "timestamp"],
    )
    op.create_index(
        "ix_rank_activity_logs_user_ts",
        "rank_activity_logs",
        ["user_id", "timestamp"],
    )


def downgrade() -> None:
    """Drop the rank tables."""
    op.drop_index("ix_rank_activity_logs_user_ts", "rank_activity_logs")
    op.drop_index("ix_rank_activity_logs_user_activity_ts", "rank_activity_logs")
    op.drop_index("ix_rank_activity_logs_user_id", "rank_activity_logs")
    op.drop_table("rank_activity_logs")
    op.drop_index("ix_users_total_xp", "users")
    op.drop_table("users")
