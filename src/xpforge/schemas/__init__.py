# src/xpforge/schemas/__init__.py

"""Pydantic schemas for API validation and serialization."""

from .leaderboard import LeaderboardEntry, RankStats
from .rank import (
    DailyLimitStatusRead,
    RankActivityLogRead,
    RankConfigRead,
    RankRequirementStatus,
    ReferenceType,
    UserRankData,
    XpAwardRequest,
    XpAwardResponse,
    XpRewardRuleRead,
)
from .user import UserBase, UserCreate, UserRead

__all__ = [
    # Leaderboard
    "LeaderboardEntry",
    "RankStats",
    # Rank
    "DailyLimitStatusRead",
    "RankActivityLogRead",
    "RankConfigRead",
    "RankRequirementStatus",
    "ReferenceType",
    "UserRankData",
    "XpAwardRequest",
    "XpAwardResponse",
    "XpRewardRuleRead",
    # User
    "UserBase",
    "UserCreate",
    "UserRead",
]
