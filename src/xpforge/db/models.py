# src/xpforge/db/models.py

"""Database models for the XPForge application."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, List

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import (
    Mapped,
    declarative_base,
    mapped_column,
    relationship,
)

Base = declarative_base()


def _new_log_id() -> str:
    return str(uuid.uuid4())


# ===============================================
# Mixins for Common Columns
# ===============================================


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=None,
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=True,
    )


class VersionMixin:
    """Mixin providing a version counter, bumped on every XP mutation."""

    version: Mapped[int] = mapped_column(default=1, nullable=False)


# ===============================================
# Core Tables: User and the XP Ledger
# ===============================================


class User(Base, TimestampMixin, VersionMixin):
    """A rank account for one user identity from the auth collaborator.

    Attributes:
        total_xp: The single source of truth for the user's XP. Tier and
            progress are always derived from it and never stored.
    """

    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    total_xp: Mapped[int] = mapped_column(default=0, nullable=False, index=True)

    # Ledger rows are never deleted, so no delete cascade here
    activity_logs: Mapped[List["RankActivityLog"]] = relationship(
        back_populates="user", passive_deletes=True
    )

    __table_args__ = (CheckConstraint("total_xp >= 0", name="ck_users_total_xp"),)

    def __init__(self, **kw: Any):
        kw.setdefault("total_xp", 0)
        super().__init__(**kw)

    @classmethod
    async def get_for_update(cls, db: AsyncSession, user_id: str) -> "User | None":
        """Fetch a user with a row lock held until the transaction ends.

        The lock is a no-op on SQLite, where the in-process user lock is the
        only guard.
        """
        query = (
            select(cls)
            .where(cls.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()


class RankActivityLog(Base):
    """One XP award. Append-only: rows are written once and never modified.

    The unique constraint on (user_id, activity, reference_id) makes retried
    awards for the same reference idempotent. Rows without a reference_id
    never collide, since NULLs are distinct in unique constraints.
    """

    __tablename__ = "rank_activity_logs"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_log_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    activity: Mapped[str] = mapped_column(String(32), nullable=False)
    xp_gained: Mapped[int] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # What triggered the award, e.g. a specific match or tournament
    reference_id: Mapped[str | None] = mapped_column(String, nullable=True)
    # 'lobby' | 'tournament' | 'match'
    reference_type: Mapped[str | None] = mapped_column(String(16), nullable=True)

    user: Mapped["User"] = relationship(back_populates="activity_logs")

    __table_args__ = (
        UniqueConstraint(
            "user_id", "activity", "reference_id", name="_user_activity_reference_uc"
        ),
        CheckConstraint("xp_gained > 0", name="ck_rank_activity_logs_xp_gained"),
        # Serves the daily-cap count
        Index("ix_rank_activity_logs_user_activity_ts", "user_id", "activity", "timestamp"),
        # Serves the most-recent-first history
        Index("ix_rank_activity_logs_user_ts", "user_id", "timestamp"),
    )
