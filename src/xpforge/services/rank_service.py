# src/xpforge/services/rank_service.py

"""Read-side assembly of rank snapshots, leaderboards and statistics."""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from xpforge.db import models
from xpforge.exceptions import UserNotFoundError
from xpforge.rank import (
    RANK_ORDER,
    RankTier,
    all_configs,
    compute_progress,
    meets_rank_requirement,
    tier_for_xp,
)
from xpforge.schemas.leaderboard import LeaderboardEntry, RankStats
from xpforge.schemas.rank import (
    RankActivityLogRead,
    RankRequirementStatus,
    UserRankData,
)
from xpforge.services import ledger
from xpforge.utils.datetime_utils import ensure_utc, utcnow

logger = logging.getLogger(__name__)


async def get_user(db: AsyncSession, user_id: str) -> models.User:
    """Fetch a rank account or raise UserNotFoundError."""
    user = await db.get(models.User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def snapshot(db: AsyncSession, user_id: str, history_limit: int) -> UserRankData:
    """
    Builds the user's current rank view.

    Tier and progress are derived from total_xp on every call; nothing
    derived is stored. Takes no locks, so it may trail an award that is
    committing concurrently.

    Raises:
        UserNotFoundError: If the user has no rank account
    """
    user = await get_user(db, user_id)
    progress = compute_progress(user.total_xp)
    history = await ledger.recent(db, user_id, limit=history_limit)

    return UserRankData(
        user_id=user.id,
        current_tier=progress.current_tier,
        next_tier=progress.next_tier,
        total_xp=progress.total_xp,
        current_tier_xp=progress.current_tier_xp,
        xp_to_next_tier=progress.xp_to_next_tier,
        progress_percentage=progress.progress_percentage,
        is_max_rank=progress.is_max_rank,
        activity_history=[RankActivityLogRead.model_validate(e) for e in history],
        updated_at=ensure_utc(user.updated_at or user.created_at),
    )


async def check_rank_requirement(
    db: AsyncSession, user_id: str, required_tier: RankTier
) -> RankRequirementStatus:
    """Tell whether the user's current tier is at or above ``required_tier``.

    Raises:
        UserNotFoundError: If the user has no rank account
    """
    user = await get_user(db, user_id)
    current = tier_for_xp(user.total_xp)
    return RankRequirementStatus(
        user_id=user.id,
        current_tier=current,
        required_tier=required_tier,
        meets_requirement=meets_rank_requirement(current, required_tier),
    )


async def leaderboard(db: AsyncSession, limit: int) -> list[LeaderboardEntry]:
    """Return the top users by total XP; ties fall back to user id order."""
    query = (
        select(models.User)
        .order_by(models.User.total_xp.desc(), models.User.id.asc())
        .limit(limit)
    )
    result = await db.execute(query)
    users = list(result.scalars().all())

    return [
        LeaderboardEntry(
            position=i + 1,
            user_id=user.id,
            username=user.username,
            total_xp=user.total_xp,
            tier=tier_for_xp(user.total_xp),
        )
        for i, user in enumerate(users)
    ]


def _tier_expression():
    """SQL CASE mapping users.total_xp to its tier value."""
    configs = list(reversed(all_configs()))
    whens = [
        (models.User.total_xp >= config.min_xp, config.tier.value)
        for config in configs[:-1]
    ]
    return case(*whens, else_=configs[-1].tier.value)


async def stats(db: AsyncSession, top_n: int) -> RankStats:
    """Aggregate tier population, top users and XP awarded in the last 24h."""
    tier_col = _tier_expression().label("tier")
    query = select(tier_col, func.count(models.User.id)).group_by(tier_col)
    rows = (await db.execute(query)).all()

    per_tier = {tier.value: 0 for tier in RANK_ORDER}
    for tier_value, count in rows:
        per_tier[tier_value] = count

    last_24h = await ledger.xp_gained_since(db, utcnow() - timedelta(hours=24))

    return RankStats(
        total_users_per_tier=per_tier,
        top_users=await leaderboard(db, top_n),
        last_24h_xp_gained=last_24h,
    )
