# src/xpforge/api/rank.py

"""API endpoints for the rank catalogs and platform-wide rank views."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from xpforge.db.session import get_db
from xpforge.rank import RankConfig, XpRewardRule, all_configs, all_rules
from xpforge.schemas.leaderboard import LeaderboardEntry, RankStats
from xpforge.schemas.rank import RankConfigRead, XpRewardRuleRead
from xpforge.services import rank_service

router = APIRouter(prefix="/rank", tags=["Rank"])


@router.get("/tiers", response_model=list[RankConfigRead])
async def read_tiers() -> list[RankConfig]:
    """
    List every tier with its XP band and perks, lowest first.
    """
    return all_configs()


@router.get("/rewards", response_model=list[XpRewardRuleRead])
async def read_reward_rules() -> list[XpRewardRule]:
    """
    List the XP granted per activity and any daily limits.
    """
    return all_rules()


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def read_leaderboard(
    limit: int = Query(10, ge=1, le=100, description="Max entries to return"),
    db: AsyncSession = Depends(get_db),
) -> list[LeaderboardEntry]:
    """
    Get users ranked by total XP (highest first).
    """
    return await rank_service.leaderboard(db, limit)


@router.get("/stats", response_model=RankStats)
async def read_rank_stats(
    top: int = Query(5, ge=1, le=50, description="Top users to include"),
    db: AsyncSession = Depends(get_db),
) -> RankStats:
    """
    Get user counts per tier, the top users and XP awarded in the last 24h.
    """
    return await rank_service.stats(db, top)
