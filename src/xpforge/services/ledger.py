# src/xpforge/services/ledger.py

"""The activity ledger: append-only log of XP awards.

None of these functions commit. Writes are flushed into the caller's
transaction so the award engine can commit the ledger row and the XP total
together.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, tzinfo

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from xpforge.db import models
from xpforge.utils.datetime_utils import day_bounds, ensure_utc, utcnow

logger = logging.getLogger(__name__)


async def append(
    db: AsyncSession, entry: models.RankActivityLog
) -> models.RankActivityLog:
    """Add a ledger entry, assigning its id and timestamp when absent."""
    if entry.id is None:
        entry.id = str(uuid.uuid4())
    if entry.timestamp is None:
        entry.timestamp = utcnow()
    else:
        entry.timestamp = ensure_utc(entry.timestamp)

    db.add(entry)
    await db.flush()
    logger.debug(
        "Ledger entry appended",
        extra={
            "entry_id": entry.id,
            "user_id": entry.user_id,
            "activity": entry.activity,
            "xp_gained": entry.xp_gained,
        },
    )
    return entry


async def count_today(
    db: AsyncSession,
    user_id: str,
    activity: str,
    as_of: datetime,
    tz: tzinfo,
) -> int:
    """Count the user's entries for ``activity`` on the calendar day of ``as_of``.

    The day is the one containing ``as_of`` in ``tz``.
    """
    start, end = day_bounds(as_of, tz)
    query = select(func.count(models.RankActivityLog.id)).where(
        models.RankActivityLog.user_id == user_id,
        models.RankActivityLog.activity == activity,
        models.RankActivityLog.timestamp >= start,
        models.RankActivityLog.timestamp < end,
    )
    return (await db.execute(query)).scalar_one()


async def recent(
    db: AsyncSession, user_id: str, limit: int, skip: int = 0
) -> list[models.RankActivityLog]:
    """Return the user's entries, most recent first.

    Every call re-reads current state.
    """
    query = (
        select(models.RankActivityLog)
        .where(models.RankActivityLog.user_id == user_id)
        .order_by(
            models.RankActivityLog.timestamp.desc(),
            models.RankActivityLog.id.desc(),
        )
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def find_by_reference(
    db: AsyncSession, user_id: str, activity: str, reference_id: str
) -> models.RankActivityLog | None:
    """Find the entry a previous award for the same reference produced."""
    query = select(models.RankActivityLog).where(
        models.RankActivityLog.user_id == user_id,
        models.RankActivityLog.activity == activity,
        models.RankActivityLog.reference_id == reference_id,
    )
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def sum_for_user(db: AsyncSession, user_id: str) -> int:
    """Total XP the ledger records for a user."""
    query = select(func.coalesce(func.sum(models.RankActivityLog.xp_gained), 0)).where(
        models.RankActivityLog.user_id == user_id
    )
    return int((await db.execute(query)).scalar_one())


async def xp_gained_since(db: AsyncSession, since: datetime) -> int:
    """Total XP awarded to anyone at or after ``since``."""
    query = select(func.coalesce(func.sum(models.RankActivityLog.xp_gained), 0)).where(
        models.RankActivityLog.timestamp >= ensure_utc(since)
    )
    return int((await db.execute(query)).scalar_one())
